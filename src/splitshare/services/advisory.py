"""Checks a proposed settlement against current balances before it is recorded.

The balance calculator trusts every settlement it is given, so anything odd
about a payment has to be caught here and shown to the user first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from splitshare.ledger.models import EPSILON


class AdvisoryKind(str, Enum):
    DEBTOR_OWES_NOTHING = "debtor_owes_nothing"
    CREDITOR_NOT_OWED = "creditor_not_owed"
    EXCEEDS_OUTSTANDING = "exceeds_outstanding"


@dataclass(frozen=True, slots=True)
class SettlementAdvisory:
    kind: AdvisoryKind
    person: str
    max_settleable: Optional[float] = None

    @property
    def blocking(self) -> bool:
        return self.kind is AdvisoryKind.EXCEEDS_OUTSTANDING


def max_settleable(balances: Mapping[str, float], debtor: str, creditor: str) -> float:
    owed = abs(min(0.0, balances.get(debtor, 0.0)))
    due = max(0.0, balances.get(creditor, 0.0))
    return min(owed, due)


def review_settlement(
    balances: Mapping[str, float],
    debtor: str,
    creditor: str,
    amount: float,
) -> list[SettlementAdvisory]:
    advisories: list[SettlementAdvisory] = []

    if balances.get(debtor, 0.0) >= -EPSILON:
        advisories.append(SettlementAdvisory(AdvisoryKind.DEBTOR_OWES_NOTHING, debtor))
    if balances.get(creditor, 0.0) <= EPSILON:
        advisories.append(SettlementAdvisory(AdvisoryKind.CREDITOR_NOT_OWED, creditor))

    limit = max_settleable(balances, debtor, creditor)
    if amount > limit + EPSILON:
        advisories.append(SettlementAdvisory(AdvisoryKind.EXCEEDS_OUTSTANDING, debtor, max_settleable=limit))

    return advisories


def needs_confirmation(advisories: list[SettlementAdvisory]) -> bool:
    return any(a.blocking for a in advisories)
