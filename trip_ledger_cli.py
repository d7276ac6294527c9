"""
TripLedger command line
- Keep trips with families, expense items per category and the payment history.
- Show who owes whom, confirm suggested payments, and the monthly savings plan.

Run:
  trip-ledger --help

Dependencies:
  pip install click openpyxl
"""
from __future__ import annotations
import dataclasses
import logging
import sys
from datetime import date
from typing import List, Optional

import click

from models import CATEGORIES, Trip
from config import default_store_path, get_default_families, load_trips, save_trips
from computations import EPS, compute_financials, days_until_trip
from csv_handler import export_items_to_csv, import_items_from_csv
from excel_export import export_excel
import trip_ops
from utils import format_currency, parse_date


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


class Store:
    """Trips loaded from one JSON file"""

    def __init__(self, path: str):
        self.path = path
        try:
            self.trips: List[Trip] = load_trips(path)
        except ValueError as ex:
            raise click.ClickException(str(ex))

    def get(self, trip_id: int) -> Trip:
        for t in self.trips:
            if t.id == trip_id:
                return t
        raise click.ClickException(f"No trip with id {trip_id}")

    def put(self, trip: Trip) -> None:
        """Replace the trip with the same id (or add it first) and save"""
        for i, t in enumerate(self.trips):
            if t.id == trip.id:
                self.trips[i] = trip
                break
        else:
            self.trips.insert(0, trip)
        save_trips(self.trips, self.path)

    def remove(self, trip_id: int) -> Trip:
        """Drop a trip and save"""
        trip = self.get(trip_id)
        self.trips = [t for t in self.trips if t is not trip]
        save_trips(self.trips, self.path)
        return trip


def _parse_today(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError:
        raise click.BadParameter("must be YYYY-MM-DD", param_hint="--today")


def _apply(fn, *args, **kwargs) -> Trip:
    """Run a trip operation and turn its errors into CLI errors"""
    try:
        return fn(*args, **kwargs)
    except (KeyError, ValueError, IndexError) as ex:
        raise click.ClickException(str(ex.args[0]) if ex.args else str(ex))


@click.group()
@click.option("--data", "data_path", type=click.Path(dir_okay=False), default=None,
              help="Trip store (JSON). Defaults to $TRIP_LEDGER_DATA or the app directory.")
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr.")
@click.pass_context
def cli(ctx: click.Context, data_path: Optional[str], verbose: bool) -> None:
    """TripLedger: shared trip expenses and who owes whom."""
    _setup_logging(verbose)
    ctx.obj = Store(data_path or default_store_path())


@cli.command("list")
@click.pass_obj
def list_trips(store: Store) -> None:
    """List trips."""
    if not store.trips:
        click.echo("No trips yet.")
        return
    for t in store.trips:
        click.echo(f"{t.id}  {t.name}  {t.start_date}  [{', '.join(t.families)}]")


@cli.command("new")
@click.argument("name")
@click.option("--start", "start_date", required=True, help="Start date YYYY-MM-DD.")
@click.option("--end", "end_date", default=None, help="End date YYYY-MM-DD.")
@click.option("--family", "families", multiple=True, help="Family name (repeatable).")
@click.pass_obj
def new_trip(store: Store, name: str, start_date: str, end_date: Optional[str], families) -> None:
    """Create a trip."""
    for value, hint in ((start_date, "--start"), (end_date, "--end")):
        if value:
            try:
                parse_date(value)
            except ValueError:
                raise click.BadParameter("must be YYYY-MM-DD", param_hint=hint)
    trip = trip_ops.new_trip(name, list(families) or get_default_families(), start_date, end_date,
                             taken_ids=[t.id for t in store.trips])
    store.put(trip)
    click.echo(f"Created trip {trip.id}")


@cli.command("edit")
@click.argument("trip_id", type=int)
@click.option("--name", default=None, help="New trip name.")
@click.option("--start", "start_date", default=None, help="Start date YYYY-MM-DD.")
@click.option("--end", "end_date", default=None, help="End date YYYY-MM-DD.")
@click.pass_obj
def edit_trip(store: Store, trip_id: int, name: Optional[str], start_date: Optional[str],
              end_date: Optional[str]) -> None:
    """Rename a trip or change its dates."""
    fields = {k: v for k, v in (("name", name), ("start_date", start_date), ("end_date", end_date))
              if v is not None}
    if not fields:
        raise click.UsageError("Nothing to change: give --name, --start or --end.")
    store.put(_apply(trip_ops.update_trip, store.get(trip_id), **fields))


@cli.command("rm")
@click.argument("trip_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def remove_trip(store: Store, trip_id: int, yes: bool) -> None:
    """Delete a trip."""
    trip = store.get(trip_id)
    if not yes:
        click.confirm(f"Delete trip '{trip.name}'?", abort=True)
    store.remove(trip_id)
    click.echo(f"Deleted trip {trip_id}")


@cli.group()
def family() -> None:
    """Manage the families of a trip."""


@family.command("add")
@click.argument("trip_id", type=int)
@click.argument("name")
@click.pass_obj
def family_add(store: Store, trip_id: int, name: str) -> None:
    store.put(trip_ops.add_family(store.get(trip_id), name))


@family.command("remove")
@click.argument("trip_id", type=int)
@click.argument("name")
@click.pass_obj
def family_remove(store: Store, trip_id: int, name: str) -> None:
    """Remove a family; its paid items stay as history."""
    store.put(_apply(trip_ops.remove_family, store.get(trip_id), name))


@cli.group()
def item() -> None:
    """Manage expense items."""


@item.command("add")
@click.argument("trip_id", type=int)
@click.argument("category", type=click.Choice(CATEGORIES))
@click.argument("name")
@click.argument("cost", type=float)
@click.option("--paid-by", default="", help="Family that paid it.")
@click.pass_obj
def item_add(store: Store, trip_id: int, category: str, name: str, cost: float, paid_by: str) -> None:
    trip = _apply(trip_ops.add_item, store.get(trip_id), category, name, cost, paid_by)
    store.put(trip)
    click.echo(trip.items[category][-1].id)


@item.command("pay")
@click.argument("trip_id", type=int)
@click.argument("category")
@click.argument("item_id")
@click.argument("payer")
@click.pass_obj
def item_pay(store: Store, trip_id: int, category: str, item_id: str, payer: str) -> None:
    """Mark an item as paid by PAYER."""
    store.put(_apply(trip_ops.update_item, store.get(trip_id), category, item_id, paid_by=payer))


@item.command("edit")
@click.argument("trip_id", type=int)
@click.argument("category")
@click.argument("item_id")
@click.option("--name", default=None, help="New item name.")
@click.option("--cost", type=float, default=None, help="New cost.")
@click.option("--unpaid", is_flag=True, help="Mark the item as not paid yet.")
@click.pass_obj
def item_edit(store: Store, trip_id: int, category: str, item_id: str, name: Optional[str],
              cost: Optional[float], unpaid: bool) -> None:
    """Change an item's name or cost, or mark it unpaid."""
    fields = {}
    if name is not None:
        fields["name"] = name
    if cost is not None:
        fields["cost"] = cost
    if unpaid:
        fields["paid"] = False
    if not fields:
        raise click.UsageError("Nothing to change: give --name, --cost or --unpaid.")
    store.put(_apply(trip_ops.update_item, store.get(trip_id), category, item_id, **fields))


@item.command("rm")
@click.argument("trip_id", type=int)
@click.argument("category")
@click.argument("item_id")
@click.pass_obj
def item_rm(store: Store, trip_id: int, category: str, item_id: str) -> None:
    store.put(_apply(trip_ops.delete_item, store.get(trip_id), category, item_id))


@cli.command()
@click.argument("trip_id", type=int)
@click.option("--today", default=None, help="Pretend today is YYYY-MM-DD.")
@click.pass_obj
def summary(store: Store, trip_id: int, today: Optional[str]) -> None:
    """Balances, suggested payments and savings plan."""
    trip = store.get(trip_id)
    now = _parse_today(today)
    s = compute_financials(trip, now)

    click.echo(f"{trip.name} ({trip.start_date} to {trip.end_date}), {days_until_trip(trip, now)} days away")
    click.echo(f"Total: {format_currency(s.total)}  Paid: {format_currency(s.paid)} ({s.progress}%)")
    click.echo(f"Fair share: {format_currency(s.fair_share)} per family")
    click.echo(f"Savings: {format_currency(s.monthly_saving_needed)} / month "
               f"for {s.months_until_trip} months")
    click.echo("")
    click.echo("Balances:")
    for b in s.balances:
        sign = "+" if b.balance >= 0 else ""
        click.echo(f"  {b.family}: {sign}{format_currency(b.balance)} "
                   f"(contribution {format_currency(b.contribution)})")
    click.echo("")
    if s.settlements:
        click.echo("Suggested payments:")
        for n, st in enumerate(s.settlements, 1):
            click.echo(f"  {n}. {st.debtor} -> {st.creditor}: {format_currency(st.amount)}")
    elif all(abs(b.balance) <= EPS for b in s.balances):
        click.echo("All settled, nothing pending.")
    else:
        click.echo("No payments can be suggested: some costs are not covered by any family.")
    if trip.reimbursements:
        click.echo("")
        click.echo("Payment history:")
        for n, r in enumerate(trip.reimbursements, 1):
            click.echo(f"  {n}. {r.date[:10]} {r.debtor} paid {format_currency(r.amount)} to {r.creditor}")


@cli.command()
@click.argument("trip_id", type=int)
@click.argument("index", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def settle(store: Store, trip_id: int, index: int, yes: bool) -> None:
    """Record suggested payment INDEX (as numbered by summary) as done."""
    trip = store.get(trip_id)
    suggestions = compute_financials(trip).settlements
    if not 1 <= index <= len(suggestions):
        raise click.ClickException(f"No suggested payment {index} (there are {len(suggestions)})")
    s = suggestions[index - 1]
    if not yes:
        click.confirm(f"Confirm that {s.debtor} paid {format_currency(s.amount)} to {s.creditor}?", abort=True)
    store.put(trip_ops.record_settlement(trip, s))
    click.echo(f"Recorded: {s.debtor} paid {format_currency(s.amount)} to {s.creditor}")


@cli.command()
@click.argument("trip_id", type=int)
@click.argument("index", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def unsettle(store: Store, trip_id: int, index: int, yes: bool) -> None:
    """Delete payment INDEX from the history."""
    trip = store.get(trip_id)
    if not 1 <= index <= len(trip.reimbursements):
        raise click.ClickException(f"No payment {index} (there are {len(trip.reimbursements)})")
    if not yes:
        click.confirm("Delete this payment record?", abort=True)
    store.put(_apply(trip_ops.delete_reimbursement, trip, index - 1))


@cli.command("export-csv")
@click.argument("trip_id", type=int)
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_obj
def export_csv(store: Store, trip_id: int, path: str) -> None:
    """Export expense items to CSV."""
    n = export_items_to_csv(store.get(trip_id).items, path)
    click.echo(f"Exported {n} items to {path}")


@cli.command("import-csv")
@click.argument("trip_id", type=int)
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--replace", is_flag=True, help="Replace items instead of appending.")
@click.pass_obj
def import_csv(store: Store, trip_id: int, path: str, replace: bool) -> None:
    """Import expense items from CSV."""
    trip = store.get(trip_id)
    imported = import_items_from_csv(path)
    if replace:
        items = {cat: [] for cat in trip.items}
    else:
        items = {cat: list(lst) for cat, lst in trip.items.items()}
    for cat, lst in imported.items():
        items.setdefault(cat, []).extend(lst)
    store.put(dataclasses.replace(trip, items=items))
    click.echo(f"Imported {sum(len(v) for v in imported.values())} items")


@cli.command("export-excel")
@click.argument("trip_id", type=int)
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--today", default=None, help="Pretend today is YYYY-MM-DD.")
@click.pass_obj
def export_excel_cmd(store: Store, trip_id: int, path: str, today: Optional[str]) -> None:
    """Export the financial report to an Excel workbook."""
    export_excel(store.get(trip_id), path, _parse_today(today))
    click.echo(f"Exported: {path}")


def main():
    """Main entry point for the application"""
    cli()


if __name__ == "__main__":
    main()
