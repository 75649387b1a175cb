"""Per-user conversation state for the bot."""

from __future__ import annotations

from typing import Optional

from splitshare.utils.parse import SettleArgs


class UserStateManager:
    def __init__(self) -> None:
        self._pending_settlement: dict[tuple[int, int], SettleArgs] = {}

    def set_pending_settlement(self, chat_id: int, user_id: int, args: SettleArgs) -> None:
        self._pending_settlement[(chat_id, user_id)] = args

    def pop_pending_settlement(self, chat_id: int, user_id: int) -> Optional[SettleArgs]:
        return self._pending_settlement.pop((chat_id, user_id), None)

    def clear_user(self, chat_id: int, user_id: int) -> None:
        self._pending_settlement.pop((chat_id, user_id), None)


state = UserStateManager()
