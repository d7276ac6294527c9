"""
Excel export functionality for TripLedger
"""
from __future__ import annotations
import logging
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import Trip
from computations import compute_financials, item_cost

logger = logging.getLogger(__name__)

MONEY = "#,##0.00"


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F46E5")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        longest = max((len(str(c.value)) for c in ws[letter] if c.value is not None), default=0)
        ws.column_dimensions[letter].width = max(min_width, min(max_width, longest + 2))


def _sheet_title(name: str) -> str:
    # Excel forbids []:*?/\ and caps titles at 31 chars
    for ch in '[]:*?/\\':
        name = name.replace(ch, "_")
    return name[:31] or "Items"


def export_excel(trip: Trip, filepath: str, today: Optional[date] = None) -> None:
    """
    Export trip finances to Excel file with multiple sheets:
    - Summary (balances and savings plan)
    - Settlements (suggested payments)
    - Payments (reimbursement history)
    - One sheet per expense category
    """
    summary = compute_financials(trip, today)
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    # Summary sheet
    ws = wb.create_sheet("Summary")
    ws.append(["Family", "Contribution", "Fair Share", "Balance"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for b in summary.balances:
        ws.append([b.family, b.contribution, summary.fair_share, b.balance])
        if b.balance < 0:
            ws.cell(ws.max_row, 4).font = Font(color="B91C1C")
    ws.append([])
    for label, value in (
        ("Total", summary.total),
        ("Paid", summary.paid),
        ("Progress %", summary.progress),
        ("Months until trip", summary.months_until_trip),
        ("Monthly saving per family", summary.monthly_saving_needed),
    ):
        ws.append([label, value])
        ws.cell(ws.max_row, 1).font = Font(bold=True)
    for r in range(2, ws.max_row + 1):
        for c in range(2, 5):
            cell = ws.cell(r, c)
            if isinstance(cell.value, float):
                cell.number_format = MONEY
    _autosize_columns(ws)

    # Settlements sheet
    ws = wb.create_sheet("Settlements")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for s in summary.settlements:
        ws.append([s.debtor, s.creditor, s.amount])
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 3).number_format = MONEY
    _autosize_columns(ws)

    # Payment history
    ws = wb.create_sheet("Payments")
    ws.append(["Date", "Debtor", "Creditor", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for r in trip.reimbursements:
        ws.append([r.date, r.debtor, r.creditor, r.amount])
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 4).number_format = MONEY
    _autosize_columns(ws)

    # One sheet per category
    for category, items in trip.items.items():
        ws = wb.create_sheet(_sheet_title(category))
        ws.append(["Item", "Cost", "Paid", "Paid By"])
        _style_header(ws, 1)
        ws.freeze_panes = "A2"
        for i in items:
            ws.append([i.name, item_cost(i), "yes" if i.paid else "no", i.paid_by])
            if i.paid:
                ws.cell(ws.max_row, 3).fill = PatternFill("solid", fgColor="D1FAE5")
        last = ws.max_row
        if last >= 2:
            ws.append(["TOTALS", f"=SUM(B2:B{last})"])
            ws.cell(ws.max_row, 1).font = Font(bold=True)
        for r in range(2, ws.max_row + 1):
            ws.cell(r, 2).number_format = MONEY
        _autosize_columns(ws)

    wb.save(filepath)
    logger.info("Exported trip %s to %s", trip.id, filepath)
