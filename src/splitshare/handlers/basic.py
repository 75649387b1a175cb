from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, Message

from splitshare.config import get_settings
from splitshare.handlers.expenses import transactions_text
from splitshare.handlers.settlements import balances_text, history_text, plan_text
from splitshare.keyboards import build_main_menu_keyboard
from splitshare.ledger.repo import LedgerError, get_global_repository
from splitshare.state import state
from splitshare.utils.parse import command_argument

basic_router = Router()

HELP_TEXT = (
    "Commands:\n"
    "/add <payer> | <amount> | <participants, comma separated> | [split] | [description] | [group]\n"
    "    split: equal, percent 60 40, weights 1 2 3 (one value per participant, payer last if not listed)\n"
    "/delete <id> - remove a transaction\n"
    "/list - all transactions\n"
    "/search person <name> | group <name> | amount <min> <max>\n"
    "/mine <name> - transactions and balance of one person\n"
    "/balances [group] - net balances\n"
    "/plan [group] - fewest payments to settle up\n"
    "/settle <debtor> | <creditor> | <amount> | [group] - record a payment\n"
    "/history - recorded payments\n"
    "/newgroup <name>, /groups"
)


@basic_router.message(CommandStart())
async def cmd_start(message: Message) -> None:
    user = message.from_user
    if user:
        state.clear_user(message.chat.id, user.id)
    await message.answer(
        "Welcome to SplitShare! Track shared expenses and settle up with as few payments as possible.\n\n"
        + HELP_TEXT,
        reply_markup=build_main_menu_keyboard(),
    )


@basic_router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT)


@basic_router.message(Command("newgroup"))
async def cmd_newgroup(message: Message) -> None:
    name = command_argument(message.text)
    if not name:
        await message.answer("Usage: /newgroup <name>")
        return
    ledger = get_global_repository().ledger(message.chat.id)
    try:
        created = ledger.add_group(name)
    except LedgerError as exc:
        await message.answer(str(exc))
        return
    await message.answer(f"Created new group: {name}" if created else f"Group {name} already exists")


@basic_router.message(Command("groups"))
async def cmd_groups(message: Message) -> None:
    groups = get_global_repository().ledger(message.chat.id).groups
    await message.answer("Available groups: " + ", ".join(groups) if groups else "No groups yet.")


@basic_router.callback_query(F.data.startswith("menu:"))
async def on_menu(callback: CallbackQuery) -> None:
    if callback.message is None or callback.data is None:
        await callback.answer()
        return
    ledger = get_global_repository().ledger(callback.message.chat.id)
    currency = get_settings().currency
    action = callback.data.split(":", 1)[1]

    if action == "balances":
        text = balances_text(ledger, None, currency)
    elif action == "plan":
        text = plan_text(ledger, None, currency)
    elif action == "list":
        text = transactions_text(ledger.transactions, currency)
    elif action == "history":
        text = history_text(ledger, currency)
    else:
        text = HELP_TEXT

    await callback.message.answer(text)
    await callback.answer()
