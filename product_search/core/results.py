"""
Explicit result values for port calls.

Each port call made by the indexer and the resolver goes through `attempt`, which
returns `Ok` or `Err` instead of letting the port's exception unwind the caller.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Type, TypeVar, Union

from .errors import ConfigurationError, PortError

T = TypeVar("T")
E = TypeVar("E", bound=PortError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def configuration_error(self) -> Optional[ConfigurationError]:
        """The ConfigurationError behind this failure, if that is what it was."""
        cause = self.error.cause
        return cause if isinstance(cause, ConfigurationError) else None


Result = Union[Ok[T], Err[E]]


def attempt(fn: Callable[..., T], error_type: Type[E], *args: Any, **kwargs: Any) -> Result:
    """
    Run one port call and capture its outcome.

    Args:
        fn: The port method to call
        error_type: Error class of the port; any other exception is wrapped into it
            with the original kept as `cause`

    Returns:
        Ok with the return value, or Err carrying an instance of `error_type`
    """
    try:
        return Ok(fn(*args, **kwargs))
    except error_type as e:
        return Err(e)
    except Exception as e:
        return Err(error_type(f"{type(e).__name__}: {e}", cause=e))
