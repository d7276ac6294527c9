"""
Settlement engine for TripLedger.

Pure functions over a trip snapshot: contributions, balances against an equal
split, greedy settlement suggestions and the monthly savings projection.
Nothing here mutates its inputs or performs I/O.
"""
from __future__ import annotations
import logging
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from models import FamilyBalance, FinancialSummary, Reimbursement, Settlement, Trip, TripItem
from utils import days_difference, month_difference, parse_date, safe_float

logger = logging.getLogger(__name__)

# Currency minor unit; balances within this band count as settled
EPS = 0.01


def flatten_items(items_by_category: Mapping[str, Iterable[TripItem]]) -> List[TripItem]:
    """All items of all categories, in category then item order"""
    out: List[TripItem] = []
    for items in items_by_category.values():
        out.extend(items or [])
    return out


def item_cost(item: TripItem) -> float:
    """Cost of an item; missing or non-numeric costs count as zero"""
    return safe_float(getattr(item, "cost", 0.0), 0.0)


def compute_totals(items: Iterable[TripItem]) -> Tuple[float, float]:
    """Return (total, paid) over the given items"""
    total = 0.0
    paid = 0.0
    for item in items:
        cost = item_cost(item)
        total += cost
        if item.paid:
            paid += cost
    return total, paid


def compute_contributions(
    families: Sequence[str],
    items: Iterable[TripItem],
    reimbursements: Iterable[Reimbursement],
) -> Dict[str, float]:
    """
    Net amount each family has put into the shared pool.

    contribution = paid items + reimbursements made - reimbursements received.
    Names that are not in `families` (stale payers, removed families) are skipped.
    """
    contribution = {f: 0.0 for f in families}

    for item in items:
        if not (item.paid and item.paid_by):
            continue
        if item.paid_by in contribution:
            contribution[item.paid_by] += item_cost(item)
        else:
            logger.debug("Skipping item %s paid by unknown family %r", item.id, item.paid_by)

    for r in reimbursements:
        amount = safe_float(r.amount, 0.0)
        if r.debtor in contribution:
            contribution[r.debtor] += amount
        if r.creditor in contribution:
            contribution[r.creditor] -= amount

    return contribution


def compute_fair_share(total: float, family_count: int) -> float:
    """Equal share per family; an empty family list divides by one"""
    return total / max(1, family_count)


def compute_balances(
    families: Sequence[str],
    items_by_category: Mapping[str, Iterable[TripItem]],
    reimbursements: Iterable[Reimbursement],
) -> Tuple[float, float, float, List[FamilyBalance]]:
    """
    Compute totals and per-family balances.
    Returns (total, paid, fair_share, balances) with balances in family order.
    """
    items = flatten_items(items_by_category)
    total, paid = compute_totals(items)
    contribution = compute_contributions(families, items, reimbursements)
    fair_share = compute_fair_share(total, len(families))

    balances = [
        FamilyBalance(f, contribution.get(f, 0.0), contribution.get(f, 0.0) - fair_share)
        for f in families
    ]
    return total, paid, fair_share, balances


def compute_settlements(balances: Sequence[FamilyBalance], eps: float = EPS) -> List[Settlement]:
    """
    Greedy largest-first settlement: the biggest debtor pays the biggest creditor.
    Ties keep family order. Not minimal in number of payments.
    """
    debtors = [(b.family, b.balance) for b in balances if b.balance < -eps]
    creditors = [(b.family, b.balance) for b in balances if b.balance > eps]
    debtors.sort(key=lambda x: x[1])
    creditors.sort(key=lambda x: x[1], reverse=True)

    settlements: List[Settlement] = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        dname, dbal = debtors[i]
        cname, cbal = creditors[j]
        x = min(abs(dbal), cbal)
        if x > eps:
            settlements.append(Settlement(dname, cname, x))
            logger.debug("Suggest %s -> %s: %.2f", dname, cname, x)
        dbal += x
        cbal -= x
        debtors[i] = (dname, dbal)
        creditors[j] = (cname, cbal)
        if abs(dbal) <= eps:
            i += 1
        if abs(cbal) <= eps:
            j += 1

    return settlements


def apply_settlements(
    balances: Sequence[FamilyBalance],
    settlements: Iterable[Settlement],
) -> Dict[str, float]:
    """Working balances after executing the given payments"""
    out = {b.family: b.balance for b in balances}
    for s in settlements:
        if s.debtor in out:
            out[s.debtor] += s.amount
        if s.creditor in out:
            out[s.creditor] -= s.amount
    return out


def _as_date(value: Union[str, date, None]) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError:
        return None


def compute_savings_plan(
    start_date: Union[str, date, None],
    fair_share: float,
    today: date,
) -> Tuple[int, float]:
    """
    Return (months_until_trip, monthly_saving_needed).
    Months are a calendar difference floored at 1; a missing start date counts as now.
    """
    start = _as_date(start_date) or today
    months = max(1, month_difference(today, start))
    return months, fair_share / months


def days_until_trip(trip: Trip, today: Optional[date] = None) -> int:
    """Days between today and the trip start (absolute), 0 if unknown"""
    start = _as_date(trip.start_date)
    if start is None:
        return 0
    return days_difference(today or date.today(), start)


def compute_financials(trip: Trip, today: Optional[date] = None) -> FinancialSummary:
    """Run the whole engine against a trip snapshot"""
    today = today or date.today()
    total, paid, fair_share, balances = compute_balances(
        trip.families, trip.items, trip.reimbursements
    )
    settlements = compute_settlements(balances)
    months, monthly = compute_savings_plan(trip.start_date, fair_share, today)

    return FinancialSummary(
        total=total,
        paid=paid,
        fair_share=fair_share,
        balances=balances,
        settlements=settlements,
        months_until_trip=months,
        monthly_saving_needed=monthly,
    )
