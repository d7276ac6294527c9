"""
Trip editing operations for TripLedger.

Each function takes a trip snapshot and returns a new Trip; the input is never
modified, so a summary computed from the old snapshot stays valid.
"""
from __future__ import annotations
import logging
import time
import uuid
from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional

from models import CATEGORIES, Reimbursement, Settlement, Trip, TripItem
from utils import now_iso, parse_date

logger = logging.getLogger(__name__)

TRIP_FIELDS = {"name", "start_date", "end_date"}


def new_trip(name: str, families: List[str], start_date: Optional[str] = None,
             end_date: Optional[str] = None, today: Optional[date] = None,
             taken_ids: Iterable[int] = ()) -> Trip:
    """Create an empty trip; dates default to today, id is unique among taken_ids"""
    day = (today or date.today()).isoformat()
    taken = set(taken_ids)
    trip_id = int(time.time() * 1000)
    while trip_id in taken:
        trip_id += 1
    return Trip(
        id=trip_id,
        name=name,
        start_date=start_date or day,
        end_date=end_date or start_date or day,
        created=day,
        families=list(families),
        reimbursements=[],
        items={cat: [] for cat in CATEGORIES},
    )


def update_trip(trip: Trip, **fields) -> Trip:
    """Rename a trip or move its dates"""
    unknown = set(fields) - TRIP_FIELDS
    if unknown:
        raise ValueError(f"Cannot edit trip field(s): {', '.join(sorted(unknown))}")
    for key in ("start_date", "end_date"):
        if key in fields:
            try:
                parse_date(fields[key])
            except (ValueError, AttributeError):
                raise ValueError(f"Invalid {key.replace('_', ' ')}: {fields[key]!r}")
    return replace(trip, **fields)


def add_family(trip: Trip, name: str) -> Trip:
    """Append a family; blank or duplicate names are ignored"""
    name = name.strip()
    if not name or name in trip.families:
        return trip
    return replace(trip, families=trip.families + [name])


def remove_family(trip: Trip, name: str) -> Trip:
    """Drop a family; items and payments naming it are kept as history"""
    if name not in trip.families:
        raise KeyError(f"Unknown family: {name}")
    return replace(trip, families=[f for f in trip.families if f != name])


def _category_items(trip: Trip, category: str) -> List[TripItem]:
    if category not in trip.items:
        raise ValueError(f"Unknown category: {category}")
    return list(trip.items[category])


def _check_payer(trip: Trip, paid_by: str) -> None:
    if paid_by and paid_by not in trip.families:
        raise ValueError(f"Unknown family: {paid_by}")


def add_item(trip: Trip, category: str, name: str = "", cost: float = 0.0,
             paid_by: str = "") -> Trip:
    """Add an expense item; naming a payer marks it paid"""
    _check_payer(trip, paid_by)
    items = _category_items(trip, category)
    items.append(TripItem(
        id=str(uuid.uuid4()),
        name=name,
        cost=cost,
        paid=bool(paid_by),
        paid_by=paid_by,
    ))
    return replace(trip, items={**trip.items, category: items})


def update_item(trip: Trip, category: str, item_id: str, **fields) -> Trip:
    """Update fields of one item; setting paid_by also sets paid"""
    _check_payer(trip, fields.get("paid_by", ""))
    items = _category_items(trip, category)
    for idx, item in enumerate(items):
        if item.id == item_id:
            break
    else:
        raise KeyError(f"Unknown item {item_id} in {category}")

    updated = replace(item, **fields)
    if fields.get("paid_by"):
        updated.paid = True
    items[idx] = updated
    return replace(trip, items={**trip.items, category: items})


def delete_item(trip: Trip, category: str, item_id: str) -> Trip:
    items = _category_items(trip, category)
    kept = [i for i in items if i.id != item_id]
    if len(kept) == len(items):
        raise KeyError(f"Unknown item {item_id} in {category}")
    return replace(trip, items={**trip.items, category: kept})


def record_settlement(trip: Trip, settlement: Settlement, when: Optional[str] = None) -> Trip:
    """Confirm a suggested payment: it becomes a reimbursement record"""
    record = Reimbursement(
        debtor=settlement.debtor,
        creditor=settlement.creditor,
        amount=settlement.amount,
        date=when or now_iso(),
    )
    logger.info("%s paid %.2f to %s", record.debtor, record.amount, record.creditor)
    return replace(trip, reimbursements=trip.reimbursements + [record])


def delete_reimbursement(trip: Trip, index: int) -> Trip:
    """Remove the reimbursement at position index (0-based)"""
    if not 0 <= index < len(trip.reimbursements):
        raise IndexError(f"No reimbursement at position {index}")
    kept = trip.reimbursements[:index] + trip.reimbursements[index + 1:]
    return replace(trip, reimbursements=kept)
