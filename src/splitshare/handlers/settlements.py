from __future__ import annotations

import warnings
from typing import Optional

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from splitshare.config import get_settings
from splitshare.keyboards import CANCEL_SETTLEMENT, CONFIRM_SETTLEMENT, build_confirm_keyboard
from splitshare.ledger.models import is_settled
from splitshare.ledger.repo import Ledger, get_global_repository
from splitshare.logging import get_logger
from splitshare.services.advisory import needs_confirmation, review_settlement
from splitshare.services.report import (
    describe_balance,
    format_advisories,
    format_balances,
    format_plan,
    format_settlement_history,
)
from splitshare.services.settlement import ConsistencyWarning
from splitshare.state import state
from splitshare.utils.parse import SettleArgs, command_argument, parse_settle_command

settlements_router = Router()
log = get_logger(__name__)


def balances_text(ledger: Ledger, group: Optional[str], currency: str) -> str:
    return format_balances(ledger.balances(group), currency, group)


def plan_text(ledger: Ledger, group: Optional[str], currency: str) -> str:
    # the plan itself reports residuals, the warning is only for library callers
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConsistencyWarning)
        plan = ledger.plan(group)
    return format_plan(plan, currency)


def history_text(ledger: Ledger, currency: str) -> str:
    return format_settlement_history(ledger.settlements, currency)


def _record(ledger: Ledger, args: SettleArgs, currency: str) -> str:
    ledger.record_settlement(args.debtor, args.creditor, args.amount, args.group)
    lines = ["Settlement recorded successfully!"]
    line = f"{args.debtor} paid {currency}{args.amount:.2f} to {args.creditor}"
    if args.group:
        line += f" for group: {args.group}"
    lines.append(line)

    outstanding = {p: v for p, v in ledger.balances(args.group).items() if not is_settled(v)}
    lines.append("")
    if outstanding:
        lines.append("Updated balances:")
        for person in sorted(outstanding):
            lines.append(f"{person}: {describe_balance(outstanding[person], currency)}")
    else:
        lines.append("All debts settled!" + (f" for group {args.group}" if args.group else ""))
    return "\n".join(lines)


@settlements_router.message(Command("balances"))
async def cmd_balances(message: Message) -> None:
    group = command_argument(message.text) or None
    ledger = get_global_repository().ledger(message.chat.id)
    try:
        text = balances_text(ledger, group, get_settings().currency)
    except ValueError as exc:
        await message.answer(str(exc))
        return
    await message.answer(text)


@settlements_router.message(Command("plan"))
async def cmd_plan(message: Message) -> None:
    group = command_argument(message.text) or None
    ledger = get_global_repository().ledger(message.chat.id)
    try:
        text = plan_text(ledger, group, get_settings().currency)
    except ValueError as exc:
        await message.answer(str(exc))
        return
    await message.answer(text)


@settlements_router.message(Command("settle"))
async def cmd_settle(message: Message) -> None:
    if not message.text:
        return
    currency = get_settings().currency
    ledger = get_global_repository().ledger(message.chat.id)
    try:
        args = parse_settle_command(message.text)
        balances = ledger.balances(args.group)
    except ValueError as exc:
        await message.answer(str(exc))
        return

    advisories = review_settlement(balances, args.debtor, args.creditor, args.amount)
    notes = format_advisories(advisories, args.amount, currency, args.group)

    if needs_confirmation(advisories):
        user = message.from_user
        if not user:
            return
        state.set_pending_settlement(message.chat.id, user.id, args)
        log.info("settlement.confirmation.requested", debtor=args.debtor, creditor=args.creditor, amount=args.amount)
        await message.answer(notes + "\nDo you want to continue?", reply_markup=build_confirm_keyboard())
        return

    try:
        text = _record(ledger, args, currency)
    except ValueError as exc:
        await message.answer(str(exc))
        return
    await message.answer(f"{notes}\n{text}" if notes else text)


@settlements_router.callback_query(F.data.in_({CONFIRM_SETTLEMENT, CANCEL_SETTLEMENT}))
async def on_settlement_decision(callback: CallbackQuery) -> None:
    if callback.message is None:
        await callback.answer()
        return
    chat_id = callback.message.chat.id
    args = state.pop_pending_settlement(chat_id, callback.from_user.id)
    if args is None:
        await callback.answer("Nothing to confirm")
        return

    if callback.data == CANCEL_SETTLEMENT:
        await callback.message.answer("Settlement cancelled.")
        await callback.answer()
        return

    ledger = get_global_repository().ledger(chat_id)
    try:
        text = _record(ledger, args, get_settings().currency)
    except ValueError as exc:
        text = str(exc)
    await callback.message.answer(text)
    await callback.answer()


@settlements_router.message(Command("history"))
async def cmd_history(message: Message) -> None:
    ledger = get_global_repository().ledger(message.chat.id)
    await message.answer(history_text(ledger, get_settings().currency))
