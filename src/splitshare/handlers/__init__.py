from splitshare.handlers.basic import basic_router
from splitshare.handlers.expenses import expenses_router
from splitshare.handlers.settlements import settlements_router

__all__ = ["basic_router", "expenses_router", "settlements_router"]
