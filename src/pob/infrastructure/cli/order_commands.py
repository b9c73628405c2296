"""CLI commands for persisted orders."""

from __future__ import annotations

import click

from pob.application.show_order import ShowOrderHandler
from pob.domain.exceptions import DomainException
from pob.infrastructure.bootstrap import lot_repository, order_repository


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of a saved order."""
    repo = order_repository()
    handler = ShowOrderHandler(order_repo=repo, lot_repo=lot_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} {dto.name!r}  (status={dto.status})")
    click.echo(f"Store:  {dto.store_id or '-'}")
    click.echo(f"Budget: {dto.budget}")
    click.echo()
    click.echo(f"  {'Lot':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.lot_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")

    totals = repo.get_totals(order_id)
    if totals is not None:
        click.echo(f"  ({totals.line_count} lines, {totals.total_units} units)")
