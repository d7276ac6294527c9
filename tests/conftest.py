import pytest

from models import CATEGORIES, Reimbursement, Trip, TripItem


def make_item(cost, paid_by="", paid=None, name="", item_id=None):
    """Expense item; paid defaults to whether a payer is set"""
    make_item.counter += 1
    return TripItem(
        id=item_id or f"item-{make_item.counter}",
        name=name or f"Item {make_item.counter}",
        cost=cost,
        paid=bool(paid_by) if paid is None else paid,
        paid_by=paid_by,
    )


make_item.counter = 0


def make_trip(families, items=None, reimbursements=None, start_date="2026-04-01"):
    """Trip with every category present; extra items go into Comida unless a dict is given"""
    by_cat = {cat: [] for cat in CATEGORIES}
    if isinstance(items, dict):
        by_cat.update(items)
    elif items:
        by_cat["Comida"] = list(items)
    return Trip(
        id=1700000000000,
        name="Costa Brava",
        start_date=start_date,
        end_date=start_date,
        created="2026-01-10",
        families=list(families),
        reimbursements=list(reimbursements or []),
        items=by_cat,
    )


def reimbursement(debtor, creditor, amount, when="2026-02-01T10:00:00.000Z"):
    return Reimbursement(debtor=debtor, creditor=creditor, amount=amount, date=when)


@pytest.fixture
def two_family_trip():
    """A paid 100 for a trip shared by A and B"""
    return make_trip(["A", "B"], [make_item(100, "A", item_id="hotel")])


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "trips.json")
