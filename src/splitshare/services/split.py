from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional, Protocol

from splitshare.ledger.models import (
    EqualSplit,
    PercentageSplit,
    Settlement,
    Transaction,
    WeightSplit,
)


class SplitError(ValueError):
    pass


class InvalidSplitError(SplitError):
    pass


class MalformedTransactionError(SplitError):
    pass


class Scoped(Protocol):
    group: Optional[str]


def in_scope(record: Scoped, group: Optional[str]) -> bool:
    """An empty or missing group filter includes every record."""
    if not group:
        return True
    return record.group == group


def _check_weights(transaction: Transaction, weights: tuple[float, ...]) -> None:
    if len(weights) != len(transaction.participants):
        raise MalformedTransactionError(
            f"transaction {transaction.id} has {len(weights)} weights "
            f"for {len(transaction.participants)} participants"
        )


def owed_shares(transaction: Transaction) -> dict[str, float]:
    """Amount each participant owes for ``transaction`` under its split policy."""
    participants = transaction.participants
    if not participants:
        raise MalformedTransactionError(f"transaction {transaction.id} has no participants")

    amount = transaction.amount
    shares: dict[str, float] = {}

    match transaction.split:
        case EqualSplit():
            per_person = amount / len(participants)
            for person in participants:
                shares[person] = shares.get(person, 0.0) + per_person
        case PercentageSplit(weights=weights):
            _check_weights(transaction, weights)
            for person, percent in zip(participants, weights):
                shares[person] = shares.get(person, 0.0) + amount * percent / 100.0
        case WeightSplit(weights=weights):
            _check_weights(transaction, weights)
            total = math.fsum(weights)
            if total == 0:
                raise InvalidSplitError(f"transaction {transaction.id} has zero total weight")
            for person, weight in zip(participants, weights):
                shares[person] = shares.get(person, 0.0) + amount * weight / total
        case other:
            raise InvalidSplitError(f"unknown split policy {other!r}")

    for person, share in shares.items():
        if not math.isfinite(share):
            raise InvalidSplitError(f"transaction {transaction.id} produced a non-finite share for {person}")
    return shares


def person_share(transaction: Transaction, person: str) -> float:
    return owed_shares(transaction).get(person, 0.0)


def calculate_balances(
    transactions: Iterable[Transaction],
    settlements: Iterable[Settlement] = (),
    group: Optional[str] = None,
) -> dict[str, float]:
    balances: dict[str, float] = {}

    for transaction in transactions:
        if transaction.settled or not in_scope(transaction, group):
            continue
        for person, share in owed_shares(transaction).items():
            balances[person] = balances.get(person, 0.0) - share
        balances[transaction.payer] = balances.get(transaction.payer, 0.0) + transaction.amount

    for settlement in settlements:
        if not in_scope(settlement, group):
            continue
        # the debtor paid, so their debt shrinks; the creditor's credit shrinks by the same amount
        balances[settlement.debtor] = balances.get(settlement.debtor, 0.0) + settlement.amount
        balances[settlement.creditor] = balances.get(settlement.creditor, 0.0) - settlement.amount

    return balances


def balance_total(balances: Mapping[str, float]) -> float:
    return math.fsum(balances.values())
