import pytest

from splitshare.ledger.models import Transfer
from splitshare.services.settlement import ConsistencyWarning, apply_transfers, plan_settlement, settle


def test_settle_balances():
    balances = {"A": 100.0, "B": -60.0, "C": -40.0}

    transfers = settle(balances)

    assert transfers == [
        Transfer(debtor="B", creditor="A", amount=60.0),
        Transfer(debtor="C", creditor="A", amount=40.0),
    ]

    after = apply_transfers(balances, transfers)
    assert all(abs(value) < 1e-9 for value in after.values())


def test_balanced_state_emits_nothing():
    plan = plan_settlement({"A": 0.0, "B": 0.005, "C": -0.004})
    assert plan.transfers == []
    assert plan.consistent


def test_empty_balances():
    assert settle({}) == []


def test_order_is_lexicographic():
    balances = {"zoe": 30.0, "amy": 20.0, "max": -50.0}
    transfers = settle(balances)
    assert [(t.debtor, t.creditor) for t in transfers] == [("max", "amy"), ("max", "zoe")]
    assert [t.amount for t in transfers] == pytest.approx([20.0, 30.0])


def test_tolerance_boundary():
    assert settle({"A": 0.01, "B": -0.01}) == []

    transfers = settle({"A": 0.011, "B": -0.011})
    assert len(transfers) == 1
    assert transfers[0].amount == pytest.approx(0.011)


def test_transfer_count_bound_and_totals():
    balances = {"A": 70.0, "B": 30.0, "C": -25.0, "D": -45.0, "E": -30.0}
    plan = plan_settlement(balances)

    assert plan.consistent
    assert len(plan.transfers) <= 2 + 3 - 1
    assert all(t.amount > 0 for t in plan.transfers)
    for person, balance in balances.items():
        paid = sum(t.amount for t in plan.transfers if t.debtor == person)
        received = sum(t.amount for t in plan.transfers if t.creditor == person)
        assert received - paid == pytest.approx(balance)
    assert plan.total == pytest.approx(100.0)


def test_inconsistent_balances_warn_and_stop():
    with pytest.warns(ConsistencyWarning):
        plan = plan_settlement({"A": 50.0, "B": -20.0})

    assert plan.transfers == [Transfer(debtor="B", creditor="A", amount=20.0)]
    assert not plan.consistent
    assert plan.residual == pytest.approx({"A": 30.0})


def test_only_debtors_warns():
    with pytest.warns(ConsistencyWarning):
        plan = plan_settlement({"A": -5.0})
    assert plan.transfers == []
    assert plan.residual == pytest.approx({"A": -5.0})
