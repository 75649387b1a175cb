from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

from splitshare.ledger.models import EqualSplit, PercentageSplit, SplitPolicy, WeightSplit

SPLIT_ALIASES = {
    "equal": "equal",
    "eq": "equal",
    "percent": "percent",
    "percentage": "percent",
    "pct": "percent",
    "%": "percent",
    "weights": "weights",
    "weight": "weights",
    "custom": "weights",
}


@dataclass(slots=True)
class AddExpenseArgs:
    payer: str
    amount: float
    participants: list[str]
    split: SplitPolicy
    description: str = ""
    group: Optional[str] = None


@dataclass(slots=True)
class SettleArgs:
    debtor: str
    creditor: str
    amount: float
    group: Optional[str] = None


def parse_number(text: str) -> float:
    value = text.strip().replace(",", ".")
    try:
        number = float(value)
    except ValueError as exc:
        raise ValueError(f"'{text.strip()}' is not a number") from exc
    if not math.isfinite(number):
        raise ValueError(f"'{text.strip()}' is not a number")
    return number


def parse_amount(text: str) -> float:
    amount = parse_number(text)
    if amount <= 0:
        raise ValueError("Amount must be positive")
    return amount


def parse_name(text: str) -> str:
    return " ".join(text.split())


def parse_people(text: str) -> list[str]:
    people: list[str] = []
    for name in text.split(","):
        name = parse_name(name)
        if name and name not in people:
            people.append(name)
    return people


def parse_split(text: str) -> SplitPolicy:
    parts = text.split()
    if not parts:
        return EqualSplit()

    kind = SPLIT_ALIASES.get(parts[0].lower())
    if kind is None:
        raise ValueError(f"Unknown split type '{parts[0]}', use equal, percent or weights")

    if kind == "equal":
        if len(parts) > 1:
            raise ValueError("Equal split takes no values")
        return EqualSplit()

    values = tuple(parse_number(p) for p in parts[1:])
    if not values:
        raise ValueError("List a value for every participant")
    if kind == "percent":
        return PercentageSplit(values)
    return WeightSplit(values)


def _split_fields(text: str, command: str) -> list[str]:
    body = re.sub(rf"^/{command}(@\w+)?", "", text.strip(), count=1)
    return [part.strip() for part in body.split("|")]


def parse_add_command(text: str) -> AddExpenseArgs:
    """Parse ``/add payer | amount | participants | split | description [| group]``."""
    parts = _split_fields(text, "add")
    if len(parts) < 3 or not parts[0]:
        raise ValueError("Usage: /add <payer> | <amount> | <participants> | [split] | [description] | [group]")

    payer = parse_name(parts[0])
    amount = parse_amount(parts[1])
    participants = parse_people(parts[2])
    split = parse_split(parts[3]) if len(parts) > 3 else EqualSplit()
    description = parts[4] if len(parts) > 4 else ""
    group = parts[5] if len(parts) > 5 and parts[5] else None

    return AddExpenseArgs(
        payer=payer,
        amount=amount,
        participants=participants,
        split=split,
        description=description,
        group=group,
    )


def parse_settle_command(text: str) -> SettleArgs:
    """Parse ``/settle debtor | creditor | amount [| group]``."""
    parts = _split_fields(text, "settle")
    if len(parts) < 3 or not parts[0] or not parts[1]:
        raise ValueError("Usage: /settle <debtor> | <creditor> | <amount> | [group]")

    debtor, creditor = parse_name(parts[0]), parse_name(parts[1])
    if debtor == creditor:
        raise ValueError("Debtor and creditor must be different people")
    group = parts[3] if len(parts) > 3 and parts[3] else None
    return SettleArgs(debtor=debtor, creditor=creditor, amount=parse_amount(parts[2]), group=group)


def command_argument(text: str | None) -> str:
    if not text:
        return ""
    parts = text.split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else ""
