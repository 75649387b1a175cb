from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

CONFIRM_SETTLEMENT = "settle:confirm"
CANCEL_SETTLEMENT = "settle:cancel"


def build_confirm_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="Record anyway", callback_data=CONFIRM_SETTLEMENT),
                InlineKeyboardButton(text="Cancel", callback_data=CANCEL_SETTLEMENT),
            ]
        ]
    )


def build_main_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="Balances", callback_data="menu:balances"),
                InlineKeyboardButton(text="Settlement plan", callback_data="menu:plan"),
            ],
            [
                InlineKeyboardButton(text="Transactions", callback_data="menu:list"),
                InlineKeyboardButton(text="History", callback_data="menu:history"),
            ],
        ]
    )
