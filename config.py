"""
Configuration and data loading/saving for TripLedger

The store is a JSON array of trips using the planner's saved-data keys
(nombre, fechaInicio, familias, conceptos, compensaciones, ...), so backups
exported by the planner can be opened directly.
"""
from __future__ import annotations
import json
import logging
import os
from typing import List

from models import CATEGORIES, Reimbursement, Trip, TripItem
from utils import app_dir

logger = logging.getLogger(__name__)

STORE_FILENAME = "viajeros_app_data.json"
DEFAULT_FAMILIES = ["Familia 1", "Familia 2"]


def default_store_path() -> str:
    """Store file: $TRIP_LEDGER_DATA or <app dir>/viajeros_app_data.json"""
    return os.environ.get("TRIP_LEDGER_DATA") or os.path.join(app_dir(), STORE_FILENAME)


def load_families(path: str) -> List[str]:
    """Load default family list from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return list(data.get("families", []))
    except FileNotFoundError:
        return []


def get_default_families() -> List[str]:
    """Families for a new trip: families.json in the app dir, else a fallback"""
    families = load_families(os.path.join(app_dir(), "families.json"))
    return families or list(DEFAULT_FAMILIES)


def item_to_dict(item: TripItem) -> dict:
    return {
        "id": item.id,
        "nombre": item.name,
        "coste": item.cost,
        "pagado": item.paid,
        "pagadoPor": item.paid_by,
    }


def dict_to_item(d: dict) -> TripItem:
    return TripItem(
        id=str(d.get("id", "")),
        name=d.get("nombre", ""),
        cost=d.get("coste", 0),
        paid=bool(d.get("pagado", False)),
        paid_by=d.get("pagadoPor") or "",
    )


def reimbursement_to_dict(r: Reimbursement) -> dict:
    return {
        "deudor": r.debtor,
        "acreedor": r.creditor,
        "cantidad": r.amount,
        "fecha": r.date,
    }


def dict_to_reimbursement(d: dict) -> Reimbursement:
    return Reimbursement(
        debtor=d.get("deudor", ""),
        creditor=d.get("acreedor", ""),
        amount=d.get("cantidad", 0),
        date=d.get("fecha", ""),
    )


def trip_to_dict(trip: Trip) -> dict:
    """Convert Trip object to dictionary for JSON serialization"""
    return {
        "id": trip.id,
        "nombre": trip.name,
        "fechaInicio": trip.start_date,
        "fechaFin": trip.end_date,
        "fechaCreacion": trip.created,
        "familias": list(trip.families),
        "compensaciones": [reimbursement_to_dict(r) for r in trip.reimbursements],
        "itinerario": trip.itinerary,
        "conceptos": {cat: [item_to_dict(i) for i in items] for cat, items in trip.items.items()},
        "socialLinks": trip.social_links,
        "locations": trip.locations,
    }


def dict_to_trip(d: dict) -> Trip:
    """Convert dictionary from JSON to Trip object"""
    items = {
        cat: [dict_to_item(i) for i in (lst or [])]
        for cat, lst in (d.get("conceptos") or {}).items()
    }
    for cat in CATEGORIES:
        items.setdefault(cat, [])

    return Trip(
        id=d.get("id", 0),
        name=d.get("nombre", ""),
        start_date=d.get("fechaInicio", ""),
        end_date=d.get("fechaFin", ""),
        created=d.get("fechaCreacion", ""),
        families=list(d.get("familias") or []),
        reimbursements=[dict_to_reimbursement(c) for c in (d.get("compensaciones") or [])],
        items=items,
        itinerary=dict(d.get("itinerario") or {}),
        social_links=list(d.get("socialLinks") or []),
        locations=list(d.get("locations") or []),
    )


def load_trips(path: str) -> List[Trip]:
    """Load all trips from the store; a missing file is an empty store"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.info("No store at %s, starting empty", path)
        return []
    except json.JSONDecodeError as ex:
        raise ValueError(f"Invalid trip store {path}: {ex}") from ex

    if not isinstance(data, list):
        raise ValueError(f"Invalid trip store {path}: expected a list of trips")
    trips = [dict_to_trip(d) for d in data if isinstance(d, dict)]
    logger.info("Loaded %d trips from %s", len(trips), path)
    return trips


def save_trips(trips: List[Trip], path: str) -> None:
    """Write all trips to the store"""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([trip_to_dict(t) for t in trips], f, ensure_ascii=False, indent=2)
    logger.info("Saved %d trips to %s", len(trips), path)
