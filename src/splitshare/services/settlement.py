from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping

from splitshare.ledger.models import EPSILON, Transfer
from splitshare.logging import get_logger

log = get_logger(__name__)


class ConsistencyWarning(UserWarning):
    """Balances did not cancel out: one side ran out before the other."""


@dataclass(slots=True)
class SettlementPlan:
    transfers: List[Transfer] = field(default_factory=list)
    residual: dict[str, float] = field(default_factory=dict)

    @property
    def consistent(self) -> bool:
        return not self.residual

    @property
    def total(self) -> float:
        return sum(t.amount for t in self.transfers)


def plan_settlement(balances: Mapping[str, float]) -> SettlementPlan:
    """Greedy creditor/debtor matching.

    People are visited in lexicographic order of their identifier so the same
    balances always produce the same plan. At most ``creditors + debtors - 1``
    transfers are emitted; this is not guaranteed to be the minimum count.
    """
    creditors: list[list] = []
    debtors: list[list] = []

    for person in sorted(balances):
        balance = balances[person]
        if balance > EPSILON:
            creditors.append([person, balance])
        elif balance < -EPSILON:
            debtors.append([person, -balance])

    plan = SettlementPlan()
    i, j = 0, 0

    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]

        amount = min(creditor[1], debtor[1])
        plan.transfers.append(Transfer(debtor=debtor[0], creditor=creditor[0], amount=amount))

        creditor[1] -= amount
        debtor[1] -= amount

        if creditor[1] < EPSILON:
            i += 1
        if debtor[1] < EPSILON:
            j += 1

    for person, remaining in creditors[i:]:
        if remaining >= EPSILON:
            plan.residual[person] = remaining
    for person, remaining in debtors[j:]:
        if remaining >= EPSILON:
            plan.residual[person] = -remaining

    if plan.residual:
        log.warning("settlement.inconsistent", residual=plan.residual)
        warnings.warn(
            f"balances do not sum to zero, unmatched: {plan.residual}",
            ConsistencyWarning,
            stacklevel=2,
        )

    return plan


def settle(balances: Mapping[str, float]) -> List[Transfer]:
    return plan_settlement(balances).transfers


def apply_transfers(balances: Mapping[str, float], transfers: Iterable[Transfer]) -> dict[str, float]:
    after = dict(balances)
    for t in transfers:
        after[t.debtor] = after.get(t.debtor, 0.0) + t.amount
        after[t.creditor] = after.get(t.creditor, 0.0) - t.amount
    return after
