"""CLI commands for the lot catalog."""

from __future__ import annotations

import click

from pob.application.add_lot import AddLotHandler
from pob.domain.exceptions import DomainException
from pob.infrastructure.bootstrap import lot_repository


@click.command("add")
@click.option("--name", required=True, help="Lot name.")
@click.option("--category", required=True, help="Lot category.")
@click.option("--price", required=True, help="Unit price (e.g. 15.00).")
@click.option("--available", default=0, type=int, help="Available units.")
def lot_add(name: str, category: str, price: str, available: int) -> None:
    """Add a new lot to the catalog."""
    handler = AddLotHandler(lot_repo=lot_repository())

    try:
        lot = handler.handle(name=name, category=category, price=price, available=available)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Lot #{lot.id} '{lot.name}' added at {lot.unit_price}")


@click.command("list")
def lot_list() -> None:
    """List all lots in the catalog."""
    lots = lot_repository().list_all()

    if not lots:
        click.echo("No lots found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Category':<12} {'Price':>10} {'Avail':>6}")
    click.echo("-" * 58)
    for lot in lots:
        click.echo(
            f"{lot.id:<6} {lot.name:<20} {lot.category:<12} "
            f"{str(lot.unit_price):>10} {lot.available_units:>6}"
        )
