"""Step outcomes shared by the scoring components.

``Ok`` carries a trusted value, ``Degraded`` a usable substitute plus the
reason it was substituted, ``Fatal`` aborts the evaluation attempt.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass
class Ok(Generic[T]):
    value: T

    @property
    def degraded(self) -> bool:
        return False


@dataclass
class Degraded(Generic[T]):
    value: T
    reason: str
    error_type: str = "text_generation_error"

    @property
    def degraded(self) -> bool:
        return True


@dataclass
class Fatal:
    reason: str
    error: Optional[Exception] = None


StepOutcome = Union[Ok[T], Degraded[T], Fatal]
