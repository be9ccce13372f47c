"""Shared types for scheduled callbacks."""

from dataclasses import dataclass
from typing import Any, Callable

# Default context standing for the task or timer that owns the callback, so
# that None stays usable as a real context.
OWNER: Any = object()


@dataclass(frozen=True)
class Invocation:
    """A callback bound to a context and positional arguments.

    The context is passed as the first argument, the way a method receives
    ``self``; the remaining arguments follow.

    Attributes:
        func: The function to call.
        context: Value passed as the first argument.
        args: Extra positional arguments.
    """

    func: Callable[..., Any]
    context: Any = None
    args: tuple[Any, ...] = ()

    def __call__(self) -> Any:
        return self.func(self.context, *self.args)
