"""
CSV export and import of expense items for TripLedger
"""
from __future__ import annotations
import csv
import logging
import uuid
from typing import Dict, List

from models import TripItem
from utils import safe_float

logger = logging.getLogger(__name__)

CSV_COLUMNS = ['category', 'id', 'name', 'cost', 'paid', 'paid_by']


def export_items_to_csv(items: Dict[str, List[TripItem]], filepath: str) -> int:
    """
    Export expense items to CSV file, one row per item.
    CSV columns: category, id, name, cost, paid, paid_by
    Returns number of rows written.
    """
    count = 0
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for category, cat_items in items.items():
            for i in cat_items:
                writer.writerow([
                    category,
                    i.id,
                    i.name,
                    safe_float(i.cost),
                    'yes' if i.paid else 'no',
                    i.paid_by,
                ])
                count += 1
    logger.info("Exported %d items to %s", count, filepath)
    return count


def _parse_bool(value: str) -> bool:
    return (value or '').strip().lower() in ('yes', 'true', '1', 'y', 'si', 'sí')


def import_items_from_csv(filepath: str) -> Dict[str, List[TripItem]]:
    """
    Import expense items from CSV file
    Returns mapping of category -> items, in file order
    """
    items: Dict[str, List[TripItem]] = {}

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            category = (row.get('category') or '').strip()
            if not category:
                logger.warning("Skipping CSV row without category: %r", row)
                continue
            paid_by = (row.get('paid_by') or '').strip()
            # without a paid column, a payer implies paid
            paid = _parse_bool(row['paid']) if row.get('paid') else bool(paid_by)
            item = TripItem(
                id=(row.get('id') or '').strip() or str(uuid.uuid4()),
                name=row.get('name') or '',
                cost=safe_float(row.get('cost'), 0.0),
                paid=paid,
                paid_by=paid_by,
            )
            items.setdefault(category, []).append(item)

    return items
