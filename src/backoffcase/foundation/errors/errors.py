"""Error classification for retried operations.

An operation reports failure by raising. The engine sorts every failure into
one of two variants:

- Permanent: retrying cannot help; surfaced immediately.
- Transient: retrying may help; the backoff policy (or an explicit
  ``retry_after``, e.g. from an HTTP 429 response) decides when.

Anything that is not already classified is Transient. Marking an error
Permanent is always an explicit act by the operation.
"""

from __future__ import annotations

from typing import Self


class BackoffError(Exception):
    """Base of the classification hierarchy. Wraps the original error value in ``err``."""

    __slots__ = ("err",)

    def __init__(self, err: object) -> None:
        self.err = err
        super().__init__(err)

    # ─── Constructors ────────────────────────────────────────────────

    @staticmethod
    def permanent(err: object) -> Permanent:
        """Error that must not be retried."""
        return Permanent(err)

    @staticmethod
    def transient(err: object) -> Transient:
        """Error retried according to the backoff policy."""
        return Transient(err)

    @staticmethod
    def retry_after(err: object, seconds: float) -> Transient:
        """Error retried after exactly ``seconds``. Useful for rate-limit responses."""
        return Transient(err, retry_after=seconds)

    # ─── Inspection ──────────────────────────────────────────────────

    @property
    def is_permanent(self) -> bool:
        return False

    @property
    def is_transient(self) -> bool:
        return False

    def with_cause(self) -> Self:
        """Chain the wrapped error as ``__cause__`` when it is an exception."""
        if isinstance(self.err, BaseException) and self.__cause__ is None:
            self.__cause__ = self.err
        return self

    # ─── Dunder Methods ──────────────────────────────────────────────

    def __str__(self) -> str:
        return str(self.err)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.err!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BackoffError):
            return NotImplemented
        return type(self) is type(other) and self.err == other.err

    def __hash__(self) -> int:
        return hash(type(self))


class Permanent(BackoffError):
    """It is impossible to execute the operation successfully. Never retried."""

    __slots__ = ()

    @property
    def is_permanent(self) -> bool:
        return True


class Transient(BackoffError):
    """Temporary failure.

    If ``retry_after`` is None the operation is retried according to the
    backoff policy, otherwise after the given number of seconds.
    """

    __slots__ = ("retry_after",)

    def __init__(self, err: object, retry_after: float | None = None) -> None:
        if retry_after is not None and retry_after < 0:
            raise ValueError(f"retry_after must be >= 0, got {retry_after}")
        super().__init__(err)
        self.retry_after = retry_after

    @property
    def is_transient(self) -> bool:
        return True

    def __repr__(self) -> str:
        if self.retry_after is None:
            return f"Transient({self.err!r})"
        return f"Transient({self.err!r}, retry_after={self.retry_after!r})"

    def __eq__(self, other: object) -> bool:
        result = super().__eq__(other)
        if result is NotImplemented or not result:
            return result
        return self.retry_after == other.retry_after  # type: ignore[attr-defined]

    __hash__ = BackoffError.__hash__


def classify(error: object) -> Permanent | Transient:
    """Classify a raw error. Permanent/Transient pass through; everything else is Transient.

    A bare ``BackoffError`` is unwrapped into ``Transient(error.err)``, so
    callers only ever see one of the two variants.
    """
    if isinstance(error, (Permanent, Transient)):
        return error
    if isinstance(error, BackoffError):
        return Transient(error.err)
    return Transient(error)
