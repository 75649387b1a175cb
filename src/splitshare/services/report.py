from __future__ import annotations

from typing import Iterable, Mapping

from splitshare.ledger.models import EPSILON, Settlement, Transaction
from splitshare.services.advisory import AdvisoryKind, SettlementAdvisory
from splitshare.services.settlement import SettlementPlan
from splitshare.services.split import person_share

SEPARATOR = "-" * 40


def money(amount: float, currency: str) -> str:
    return f"{currency}{amount:.2f}"


def describe_balance(value: float, currency: str) -> str:
    if value > EPSILON:
        return f"Gets {money(value, currency)}"
    if value < -EPSILON:
        return f"Owes {money(-value, currency)}"
    return "Settled"


def _scope_label(group: str | None) -> str:
    return f"[Group: {group}]" if group else "[Personal]"


def format_balances(balances: Mapping[str, float], currency: str, group: str | None = None) -> str:
    title = f"=== Net Balances: {group} ===" if group else "=== Net Balances ==="
    if not balances:
        return f"{title}\nNo balances yet."
    lines = [title]
    for person in sorted(balances):
        lines.append(f"{person}: {describe_balance(balances[person], currency)}")
    return "\n".join(lines)


def format_plan(plan: SettlementPlan, currency: str) -> str:
    lines = ["=== Optimized Settlement Plan ==="]
    if not plan.transfers and plan.consistent:
        lines.append("All settlements are complete! No pending transactions.")
        return "\n".join(lines)

    for t in plan.transfers:
        lines.append(f"{t.debtor} ---> {t.creditor}: {money(t.amount, currency)}")

    if not plan.consistent:
        lines.append("")
        lines.append("Warning: balances do not cancel out. Unmatched:")
        for person in sorted(plan.residual):
            lines.append(f"  {person}: {describe_balance(plan.residual[person], currency)}")
    return "\n".join(lines)


def format_transaction(transaction: Transaction, currency: str) -> str:
    header = f"ID: {transaction.id} | {transaction.payer} paid {money(transaction.amount, currency)}"
    if transaction.group:
        header += f" {_scope_label(transaction.group)}"
    lines = [header]
    if transaction.description:
        lines.append(f"  Description: {transaction.description}")
    lines.append(f"  Participants: {', '.join(transaction.participants)}")
    lines.append(f"  Split: {transaction.split.split_type.value}")
    lines.append(f"  Date: {transaction.created_at:%Y-%m-%d %H:%M}")
    lines.append(f"  Status: {'Settled' if transaction.settled else 'Active'}")
    return "\n".join(lines)


def format_transactions(transactions: Iterable[Transaction], currency: str, empty: str = "No transactions found.") -> str:
    blocks = [format_transaction(t, currency) for t in transactions]
    if not blocks:
        return empty
    return f"\n{SEPARATOR}\n".join(blocks)


def format_personal_view(
    person: str,
    transactions: Iterable[Transaction],
    balances: Mapping[str, float],
    currency: str,
) -> str:
    lines = [f"=== Transactions of {person} ==="]
    found = False
    for t in transactions:
        if not t.involves(person):
            continue
        found = True
        share = money(person_share(t, person), currency)
        who = "You" if t.payer == person else t.payer
        lines.append(
            f"ID: {t.id} | {who} paid {money(t.amount, currency)} (Your share: {share}) {_scope_label(t.group)}"
        )
        if t.description:
            lines.append(f"  Description: {t.description}")
    if not found:
        lines.append(f"No transactions found for {person}.")

    lines.append("")
    lines.append(f"Overall balance: {describe_balance(balances.get(person, 0.0), currency)}")
    return "\n".join(lines)


def format_settlement_history(settlements: Iterable[Settlement], currency: str) -> str:
    lines = ["=== Settlement History ==="]
    entries = 0
    for s in settlements:
        entries += 1
        lines.append(f"{s.debtor} ---> {s.creditor}: {money(s.amount, currency)} {_scope_label(s.group)}")
        lines.append(f"  Date: {s.created_at:%Y-%m-%d %H:%M}")
    if not entries:
        lines.append("No settlements recorded yet.")
    return "\n".join(lines)


def format_advisories(
    advisories: Iterable[SettlementAdvisory],
    amount: float,
    currency: str,
    group: str | None = None,
) -> str:
    where = f" in group {group}" if group else ""
    lines = []
    for advisory in advisories:
        if advisory.kind is AdvisoryKind.DEBTOR_OWES_NOTHING:
            lines.append(f"Warning: {advisory.person} doesn't owe money{where}.")
        elif advisory.kind is AdvisoryKind.CREDITOR_NOT_OWED:
            lines.append(f"Warning: {advisory.person} is not owed money{where}.")
        elif advisory.kind is AdvisoryKind.EXCEEDS_OUTSTANDING:
            lines.append(
                f"Warning: settlement amount ({money(amount, currency)}) is more than "
                f"the outstanding debt ({money(advisory.max_settleable or 0.0, currency)})."
            )
    return "\n".join(lines)
