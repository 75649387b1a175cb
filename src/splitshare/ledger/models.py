from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence, Union

# Balances within this distance of zero count as settled.
EPSILON = 0.01


def is_settled(value: float) -> bool:
    return abs(value) <= EPSILON


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SplitType(str, Enum):
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    WEIGHT = "weight"


@dataclass(frozen=True, slots=True)
class EqualSplit:
    @property
    def split_type(self) -> SplitType:
        return SplitType.EQUAL

    @property
    def weights(self) -> tuple[float, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class PercentageSplit:
    weights: tuple[float, ...]

    @property
    def split_type(self) -> SplitType:
        return SplitType.PERCENTAGE


@dataclass(frozen=True, slots=True)
class WeightSplit:
    weights: tuple[float, ...]

    @property
    def split_type(self) -> SplitType:
        return SplitType.WEIGHT


SplitPolicy = Union[EqualSplit, PercentageSplit, WeightSplit]


@dataclass(frozen=True, slots=True)
class Transaction:
    id: int
    payer: str
    amount: float
    participants: Sequence[str]
    split: SplitPolicy = EqualSplit()
    description: str = ""
    group: Optional[str] = None
    created_at: datetime = field(default_factory=_now)
    settled: bool = False

    @property
    def weights(self) -> tuple[float, ...]:
        return self.split.weights

    def involves(self, person: str) -> bool:
        return person == self.payer or person in self.participants


@dataclass(frozen=True, slots=True)
class Settlement:
    debtor: str
    creditor: str
    amount: float
    group: Optional[str] = None
    created_at: datetime = field(default_factory=_now)


@dataclass(frozen=True, slots=True)
class Transfer:
    debtor: str
    creditor: str
    amount: float
