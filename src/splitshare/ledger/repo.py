from __future__ import annotations

import math
from typing import Iterable, Optional

from splitshare.ledger.models import (
    EqualSplit,
    PercentageSplit,
    Settlement,
    SplitPolicy,
    Transaction,
    WeightSplit,
)
from splitshare.logging import get_logger
from splitshare.services.settlement import SettlementPlan, plan_settlement
from splitshare.services.split import calculate_balances


class LedgerError(ValueError):
    pass


def _unique(people: Iterable[str]) -> list[str]:
    result: list[str] = []
    for person in people:
        person = person.strip()
        if person and person not in result:
            result.append(person)
    return result


class Ledger:
    """Transactions, settlements and groups of one chat, kept in memory."""

    def __init__(self) -> None:
        self._transactions: list[Transaction] = []
        self._settlements: list[Settlement] = []
        self._groups: list[str] = []
        self._next_id = 1
        self._log = get_logger(__name__)

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @property
    def settlements(self) -> list[Settlement]:
        return list(self._settlements)

    @property
    def groups(self) -> list[str]:
        return list(self._groups)

    def add_group(self, name: str) -> bool:
        name = name.strip()
        if not name:
            raise LedgerError("group name must not be empty")
        if name in self._groups:
            return False
        self._groups.append(name)
        self._log.info("ledger.group.added", group=name)
        return True

    def add_transaction(
        self,
        payer: str,
        amount: float,
        participants: Iterable[str],
        split: SplitPolicy = EqualSplit(),
        description: str = "",
        group: Optional[str] = None,
    ) -> Transaction:
        payer = payer.strip()
        if not payer:
            raise LedgerError("payer must not be empty")
        if not math.isfinite(amount) or amount <= 0:
            raise LedgerError("amount must be positive")

        people = _unique(participants)
        if payer not in people:
            people.append(payer)

        if not isinstance(split, EqualSplit) and len(split.weights) != len(people):
            raise LedgerError(
                f"expected {len(people)} weights for {', '.join(people)}, got {len(split.weights)}"
            )
        if isinstance(split, PercentageSplit) and abs(math.fsum(split.weights) - 100.0) > 0.01:
            raise LedgerError("percentages must add up to 100")
        if any(w < 0 for w in split.weights):
            raise LedgerError("weights must not be negative")
        if isinstance(split, WeightSplit) and math.fsum(split.weights) == 0:
            raise LedgerError("weights must not all be zero")

        group = group.strip() if group else None
        if group:
            self.add_group(group)

        transaction = Transaction(
            id=self._next_id,
            payer=payer,
            amount=amount,
            participants=tuple(people),
            split=split,
            description=description.strip(),
            group=group or None,
        )
        self._next_id += 1
        self._transactions.append(transaction)
        self._log.info(
            "ledger.transaction.added",
            transaction_id=transaction.id,
            payer=payer,
            amount=amount,
            split=split.split_type.value,
            group=transaction.group,
        )
        return transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def delete_transaction(self, transaction_id: int) -> bool:
        transaction = self.get_transaction(transaction_id)
        if transaction is None:
            return False
        self._transactions.remove(transaction)
        self._log.info("ledger.transaction.deleted", transaction_id=transaction_id)
        return True

    def record_settlement(
        self,
        debtor: str,
        creditor: str,
        amount: float,
        group: Optional[str] = None,
    ) -> Settlement:
        debtor, creditor = debtor.strip(), creditor.strip()
        if not debtor or not creditor:
            raise LedgerError("debtor and creditor must not be empty")
        if debtor == creditor:
            raise LedgerError("debtor and creditor must be different people")
        if not math.isfinite(amount) or amount <= 0:
            raise LedgerError("amount must be positive")

        group = group.strip() if group else None
        settlement = Settlement(debtor=debtor, creditor=creditor, amount=amount, group=group or None)
        self._settlements.append(settlement)
        self._log.info(
            "ledger.settlement.recorded",
            debtor=debtor,
            creditor=creditor,
            amount=amount,
            group=settlement.group,
        )
        return settlement

    def filter_by_person(self, person: str) -> list[Transaction]:
        return [t for t in self._transactions if t.involves(person)]

    def filter_by_group(self, group: str) -> list[Transaction]:
        return [t for t in self._transactions if t.group == group]

    def filter_by_amount(self, minimum: float, maximum: float) -> list[Transaction]:
        return [t for t in self._transactions if minimum <= t.amount <= maximum]

    def balances(self, group: Optional[str] = None) -> dict[str, float]:
        return calculate_balances(self._transactions, self._settlements, group)

    def plan(self, group: Optional[str] = None) -> SettlementPlan:
        return plan_settlement(self.balances(group))


class LedgerRepository:
    def __init__(self) -> None:
        self._ledgers: dict[int, Ledger] = {}

    def ledger(self, chat_id: int) -> Ledger:
        if chat_id not in self._ledgers:
            self._ledgers[chat_id] = Ledger()
        return self._ledgers[chat_id]


_global_repo: LedgerRepository | None = None


def set_global_repository(repo: LedgerRepository) -> None:
    global _global_repo
    _global_repo = repo


def get_global_repository() -> LedgerRepository:
    if _global_repo is None:
        raise RuntimeError("Repository is not initialized")
    return _global_repo
