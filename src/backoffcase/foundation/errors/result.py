"""Ok/Err items for fallible streams.

A stream cannot raise an error and keep going, so sources that want to report
failures without closing yield ``Err(error)`` items instead. ``StreamBackoff``
inspects the variant to decide whether to back off; consumers read the value
with ``unwrap()`` / ``unwrap_err()``.
"""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


class Result(Generic[T, E]):
    """A stream item: success (Ok) or failure (Err).

    Examples:
        >>> Ok(42).unwrap()
        42
        >>> Err("timeout").is_err()
        True
    """

    __slots__ = ("_value", "_is_ok")

    def __init__(self, value: T | E, is_ok: bool) -> None:
        self._value = value
        self._is_ok = is_ok

    @classmethod
    def of(cls, item: object) -> Result[object, object]:
        """Lift a plain stream item to Ok; Results pass through unchanged."""
        return item if isinstance(item, Result) else cls(item, True)

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    def unwrap(self) -> T:
        """Extract the Ok value. Raises RuntimeError on Err."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"unwrap() on Err: {self._value}")

    def unwrap_err(self) -> E:
        """Extract the Err value. Raises RuntimeError on Ok."""
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"unwrap_err() on Ok: {self._value}")

    def __repr__(self) -> str:
        return f"{'Ok' if self._is_ok else 'Err'}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._is_ok == other._is_ok and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._is_ok, self._value))


def Ok(value: T) -> Result[T, E]:  # noqa: N802
    """Successful stream item."""
    return Result(value, True)


def Err(error: E) -> Result[T, E]:  # noqa: N802
    """Failed stream item; triggers a backoff."""
    return Result(error, False)
