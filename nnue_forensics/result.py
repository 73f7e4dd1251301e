# nnue_forensics/result.py
"""
Tagged success/error results for callers that prefer values over exceptions.

The core raises typed ``NNUEError`` subclasses; ``attempt`` turns any of them
into an ``Outcome`` so the failure mode is part of the returned value.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from loguru import logger

from nnue_forensics.errors import NNUEError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value (``ok``) or the NNUEError that prevented it."""

    value: Optional[T] = None
    error: Optional[NNUEError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> str:
        """Name of the error class, or ``"ok"``."""
        return "ok" if self.error is None else type(self.error).__name__

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def attempt(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    """Call ``fn`` and capture an NNUEError as a failed Outcome."""
    try:
        return Outcome(value=fn(*args, **kwargs))
    except NNUEError as e:
        name = getattr(fn, "__name__", repr(fn))
        logger.debug("{fn} failed: {kind}: {error}", fn=name, kind=type(e).__name__, error=e)
        return Outcome(error=e)
