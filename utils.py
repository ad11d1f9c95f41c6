from functools import wraps
from typing import (
    Any,
    Callable,
    Dict,
    Literal,
    Optional,
    TypeVar,
)


def sign(n: int) -> Literal[-1, 1]:
    if n < 0:
        return -1
    if n > 0:
        return 1
    raise ValueError(f"Sign of 0 is undefined")


T = TypeVar("T")


def unwrap(x: Optional[T]) -> T:
    assert x is not None
    return x


R = TypeVar("R")

S = TypeVar("S", bound="Cached")


class Cached:
    def __init__(self):
        self._cache: Dict[str, Any] = {}

    def do_cached_method(self: S, method: Callable[[S], R]) -> R:
        if method.__name__ in self._cache:
            return self._cache[method.__name__]
        result = method(self)
        self._cache[method.__name__] = result
        return result


def cached_value(func: Callable[[S], R]) -> Callable[[S], R]:
    @wraps(func)
    def wrap(self: S) -> R:
        return self.do_cached_method(func)

    return wrap
