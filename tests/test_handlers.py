import pytest

from splitshare.config import get_settings
from splitshare.handlers.basic import cmd_groups, cmd_newgroup
from splitshare.handlers.expenses import cmd_add, cmd_delete, cmd_mine, cmd_search
from splitshare.handlers.settlements import cmd_balances, cmd_plan, cmd_settle, on_settlement_decision
from splitshare.keyboards import CANCEL_SETTLEMENT, CONFIRM_SETTLEMENT
from splitshare.ledger.repo import LedgerRepository, set_global_repository
from splitshare.state import state


class StubChat:
    def __init__(self, chat_id: int) -> None:
        self.id = chat_id


class StubUser:
    def __init__(self, user_id: int) -> None:
        self.id = user_id


class StubMessage:
    def __init__(self, text: str, chat_id: int = 1, user_id: int = 10) -> None:
        self.text = text
        self.chat = StubChat(chat_id)
        self.from_user = StubUser(user_id)
        self.answers: list[str] = []
        self.markups: list[object] = []

    async def answer(self, text: str, **kwargs: object) -> None:
        self.answers.append(text)
        self.markups.append(kwargs.get("reply_markup"))


class StubCallback:
    def __init__(self, data: str, message: StubMessage) -> None:
        self.data = data
        self.message = message
        self.from_user = message.from_user
        self.answered = False

    async def answer(self, text: str | None = None, **kwargs: object) -> None:
        self.answered = True


@pytest.fixture(autouse=True)
def repo(monkeypatch):
    monkeypatch.setenv("BOT_TOKEN", "123:test")
    monkeypatch.setenv("CURRENCY", "$")
    get_settings.cache_clear()
    repository = LedgerRepository()
    set_global_repository(repository)
    state.clear_user(1, 10)
    yield repository
    get_settings.cache_clear()


@pytest.mark.asyncio
async def test_add_and_balances(repo):
    msg = StubMessage("/add A | 300 | A, B, C | equal | Dinner | trip")
    await cmd_add(msg)
    assert "ID: 1" in msg.answers[0]

    balances = StubMessage("/balances trip")
    await cmd_balances(balances)
    assert "A: Gets $200.00" in balances.answers[0]
    assert "B: Owes $100.00" in balances.answers[0]

    plan = StubMessage("/plan")
    await cmd_plan(plan)
    assert "B ---> A: $100.00" in plan.answers[0]
    assert "C ---> A: $100.00" in plan.answers[0]


@pytest.mark.asyncio
async def test_add_reports_errors():
    msg = StubMessage("/add A | 100 | B | percent 50 20")
    await cmd_add(msg)
    assert msg.answers == ["percentages must add up to 100"]


@pytest.mark.asyncio
async def test_delete_search_and_mine(repo):
    await cmd_add(StubMessage("/add A | 30 | B"))
    await cmd_add(StubMessage("/add B | 90 | C | weights 1 2"))

    search = StubMessage("/search amount 50 100")
    await cmd_search(search)
    assert "ID: 2" in search.answers[0]
    assert "ID: 1" not in search.answers[0]

    mine = StubMessage("/mine C")
    await cmd_mine(mine)
    assert "Your share: $30.00" in mine.answers[0]

    delete = StubMessage("/delete 1")
    await cmd_delete(delete)
    assert delete.answers == ["Transaction deleted successfully!"]
    assert [t.id for t in repo.ledger(1).transactions] == [2]


@pytest.mark.asyncio
async def test_settle_records_payment(repo):
    await cmd_add(StubMessage("/add A | 300 | A, B, C"))
    msg = StubMessage("/settle B | A | 100")
    await cmd_settle(msg)
    assert "Settlement recorded successfully!" in msg.answers[0]
    assert "C: Owes $100.00" in msg.answers[0]
    assert len(repo.ledger(1).settlements) == 1


@pytest.mark.asyncio
async def test_overpayment_needs_confirmation(repo):
    await cmd_add(StubMessage("/add A | 300 | A, B, C"))
    msg = StubMessage("/settle B | A | 500")
    await cmd_settle(msg)
    assert "more than the outstanding debt" in msg.answers[0]
    assert msg.markups[0] is not None
    assert repo.ledger(1).settlements == []

    confirm = StubCallback(CONFIRM_SETTLEMENT, msg)
    await on_settlement_decision(confirm)
    assert confirm.answered
    assert len(repo.ledger(1).settlements) == 1

    await cmd_settle(StubMessage("/settle C | A | 500"))
    cancel_msg = StubMessage("")
    cancel = StubCallback(CANCEL_SETTLEMENT, cancel_msg)
    await on_settlement_decision(cancel)
    assert cancel_msg.answers == ["Settlement cancelled."]
    assert len(repo.ledger(1).settlements) == 1


@pytest.mark.asyncio
async def test_groups(repo):
    msg = StubMessage("/newgroup flat")
    await cmd_newgroup(msg)
    assert msg.answers == ["Created new group: flat"]

    listing = StubMessage("/groups")
    await cmd_groups(listing)
    assert listing.answers == ["Available groups: flat"]


@pytest.mark.asyncio
async def test_multi_word_names(repo):
    await cmd_add(StubMessage("/add Mary Ann | 30 | Mary Ann, Bob | equal | Taxi"))
    assert repo.ledger(1).balances() == pytest.approx({"Mary Ann": 15, "Bob": -15})

    plan = StubMessage("/plan")
    await cmd_plan(plan)
    assert "Bob ---> Mary Ann: $15.00" in plan.answers[0]

    settle = StubMessage("/settle Bob | Mary Ann | 15")
    await cmd_settle(settle)
    assert "All debts settled!" in settle.answers[0]

    mine = StubMessage("/mine Mary  Ann")
    await cmd_mine(mine)
    assert "You paid $30.00 (Your share: $15.00)" in mine.answers[0]
    assert "Overall balance: Settled" in mine.answers[0]


@pytest.mark.asyncio
async def test_settle_warning_names_the_group(repo):
    await cmd_add(StubMessage("/add A | 100 | A, B | equal | Fuel | trip"))
    msg = StubMessage("/settle A | B | 10 | trip")
    await cmd_settle(msg)
    assert "Warning: A doesn't owe money in group trip." in msg.answers[0]
    assert "Warning: B is not owed money in group trip." in msg.answers[0]
