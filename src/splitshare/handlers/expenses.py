from __future__ import annotations

from typing import Iterable

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from splitshare.config import get_settings
from splitshare.ledger.models import Transaction
from splitshare.ledger.repo import get_global_repository
from splitshare.logging import get_logger
from splitshare.services.report import format_personal_view, format_transactions
from splitshare.utils.parse import command_argument, parse_add_command, parse_name, parse_number

expenses_router = Router()
log = get_logger(__name__)


def transactions_text(transactions: Iterable[Transaction], currency: str) -> str:
    return "=== All Transactions ===\n" + format_transactions(transactions, currency)


@expenses_router.message(Command("add"))
async def cmd_add(message: Message) -> None:
    if not message.text:
        return
    ledger = get_global_repository().ledger(message.chat.id)
    try:
        args = parse_add_command(message.text)
        transaction = ledger.add_transaction(
            payer=args.payer,
            amount=args.amount,
            participants=args.participants,
            split=args.split,
            description=args.description,
            group=args.group,
        )
    except ValueError as exc:
        await message.answer(str(exc))
        return

    await message.answer(
        f"Transaction added successfully! ID: {transaction.id}\n"
        f"Participants: {', '.join(transaction.participants)}"
    )


@expenses_router.message(Command("delete"))
async def cmd_delete(message: Message) -> None:
    arg = command_argument(message.text)
    try:
        transaction_id = int(arg)
    except ValueError:
        await message.answer("Usage: /delete <transaction id>")
        return

    ledger = get_global_repository().ledger(message.chat.id)
    if ledger.delete_transaction(transaction_id):
        await message.answer("Transaction deleted successfully!")
    else:
        await message.answer("Transaction not found!")


@expenses_router.message(Command("list"))
async def cmd_list(message: Message) -> None:
    ledger = get_global_repository().ledger(message.chat.id)
    await message.answer(transactions_text(ledger.transactions, get_settings().currency))


@expenses_router.message(Command("search"))
async def cmd_search(message: Message) -> None:
    usage = "Usage: /search person <name> | group <name> | amount <min> <max>"
    parts = command_argument(message.text).split(maxsplit=1)
    if len(parts) < 2:
        await message.answer(usage)
        return

    ledger = get_global_repository().ledger(message.chat.id)
    mode, value = parts[0].lower(), parts[1].strip()
    if mode == "person":
        found = ledger.filter_by_person(value)
    elif mode == "group":
        found = ledger.filter_by_group(value)
    elif mode == "amount":
        bounds = value.split()
        if len(bounds) != 2:
            await message.answer(usage)
            return
        try:
            minimum, maximum = parse_number(bounds[0]), parse_number(bounds[1])
        except ValueError as exc:
            await message.answer(str(exc))
            return
        found = ledger.filter_by_amount(minimum, maximum)
    else:
        await message.answer(usage)
        return

    log.info("ledger.search", mode=mode, matches=len(found))
    text = format_transactions(found, get_settings().currency, empty="No transactions found matching the criteria.")
    await message.answer("=== Filtered Results ===\n" + text)


@expenses_router.message(Command("mine"))
async def cmd_mine(message: Message) -> None:
    person = parse_name(command_argument(message.text))
    if not person:
        await message.answer("Usage: /mine <name>")
        return
    ledger = get_global_repository().ledger(message.chat.id)
    try:
        text = format_personal_view(person, ledger.transactions, ledger.balances(), get_settings().currency)
    except ValueError as exc:
        await message.answer(str(exc))
        return
    await message.answer(text)
