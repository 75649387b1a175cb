from __future__ import annotations

import asyncio

from aiogram import Bot, Dispatcher

from splitshare.config import get_settings
from splitshare.handlers import basic_router, expenses_router, settlements_router
from splitshare.ledger.repo import LedgerRepository, set_global_repository
from splitshare.logging import configure_logging, get_logger


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    bot = Bot(token=settings.bot_token)
    dp = Dispatcher()

    dp.include_router(basic_router)
    dp.include_router(expenses_router)
    dp.include_router(settlements_router)

    set_global_repository(LedgerRepository())

    log = get_logger(__name__)
    log.info("bot.start")
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()
        log.info("bot.stop")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
