"""CLI commands for the interactive purchase order builder.

Each command is one request: the builder is resumed from the session
store, the command runs, and the builder's state is written back.
"""

from __future__ import annotations

from collections.abc import Callable

import click

from pob.application.order_builder import OrderBuilder
from pob.domain.exceptions import DomainException
from pob.infrastructure.bootstrap import (
    lot_repository,
    order_repository,
    page_size,
    session_store,
)

session_option = click.option(
    "--session", "session_id", default="default", show_default=True,
    help="Builder session to work in.",
)


def _run(session_id: str, action: Callable[[OrderBuilder], None]) -> OrderBuilder:
    """Resume the session's builder, apply *action*, save the session.

    Post-commit triggers queued by a save run last, after the session
    has been written.
    """
    sessions = session_store()
    state = sessions.get(session_id)
    if state is None:
        raise click.ClickException(
            f"No builder session '{session_id}'. Run 'pob builder open' first."
        )

    orders = order_repository()
    try:
        builder = OrderBuilder.resume(
            state, lot_repository(), orders, page_size=page_size()
        )
        action(builder)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    sessions.save(session_id, builder.snapshot())
    orders.dispatcher.drain()
    return builder


def _display(builder: OrderBuilder) -> None:
    summary = builder.summary()
    page = builder.page_view()
    edit = builder.editability

    click.echo(f"== {summary.heading} ==")
    click.echo(f"Store: {summary.store_id or '-'}   Status: {summary.status}   Budget: {summary.budget}")
    locked = [name for name in ("name", "budget", "status", "quantities") if not getattr(edit, name)]
    if locked:
        click.echo(f"Locked: {', '.join(locked)}")
    click.echo()

    if builder.filter_text != page.category_filter and builder.filter_text is not None:
        click.echo(f"Filter: {page.category_filter or 'off'} (pending: {builder.filter_text})")
    else:
        click.echo(f"Filter: {page.category_filter or 'off'}")

    click.echo(f"  {'ID':<6} {'Lot':<20} {'Category':<12} {'Price':>10} {'Avail':>6} {'Qty':>5}")
    click.echo(f"  {'-'*64}")
    for row in page.rows:
        click.echo(
            f"  {row.lot_id:<6} {row.lot_name:<20} {row.category:<12} "
            f"{row.unit_price:>10} {row.available_units:>6} {row.quantity:>5}"
        )
    click.echo(f"  {'-'*64}")

    prev_mark = " " if page.previous_disabled else "<"
    next_mark = " " if page.next_disabled else ">"
    click.echo(f"  {prev_mark} Page {page.page_index} of {page.page_count} {next_mark}")
    click.echo(
        f"  Units: {summary.total_units}   "
        f"Total: {summary.total_price or '-'}   "
        f"Avg/unit: {summary.average_unit_price or '-'}"
    )


@click.command("open")
@session_option
@click.option("--order-id", type=int, default=None, help="Edit an existing order.")
@click.option("--name", default="", help="Name for a new order.")
@click.option("--store", "store_id", default=None, help="Store the new order belongs to.")
@click.option("--budget", default=None, help="Budget ceiling for a new order.")
def builder_open(
    session_id: str,
    order_id: int | None,
    name: str,
    store_id: str | None,
    budget: str | None,
) -> None:
    """Start a builder session for a new or existing order."""
    try:
        builder = OrderBuilder.open(
            lot_repository(),
            order_repository(),
            order_id,
            name=name,
            store_id=store_id,
            budget=budget,
            page_size=page_size(),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    session_store().save(session_id, builder.snapshot())
    _display(builder)


@click.command("show")
@session_option
def builder_show(session_id: str) -> None:
    """Show the current page of the builder."""
    _display(_run(session_id, lambda b: None))


@click.command("filter")
@session_option
@click.argument("category", required=False)
def builder_filter(session_id: str, category: str | None) -> None:
    """Set the category filter text (takes effect on 'apply')."""

    def assign(builder: OrderBuilder) -> None:
        builder.filter_text = category

    _run(session_id, assign)
    click.echo(f"Filter text set to '{category or 'off'}'. Run 'apply' to use it.")


@click.command("apply")
@session_option
def builder_apply(session_id: str) -> None:
    """Apply the pending category filter."""
    _display(_run(session_id, lambda b: b.apply_filter()))


def _navigation(name: str, method: str, help_text: str) -> click.Command:
    @click.command(name, help=help_text)
    @session_option
    def command(session_id: str) -> None:
        _display(_run(session_id, lambda b: getattr(b, method)()))

    return command


builder_first = _navigation("first", "first", "Go to the first page.")
builder_prev = _navigation("prev", "previous", "Go to the previous page.")
builder_next = _navigation("next", "next", "Go to the next page.")
builder_last = _navigation("last", "last", "Go to the last page.")


@click.command("qty")
@session_option
@click.option("--lot", "lot_id", required=True, help="Lot ID.")
@click.option("--quantity", required=True, type=int, help="Units to order (0 removes).")
def builder_qty(session_id: str, lot_id: str, quantity: int) -> None:
    """Set the quantity for a lot."""
    _run(session_id, lambda b: b.set_quantity(lot_id, quantity))
    click.echo(f"Lot {lot_id} quantity set to {quantity}")


@click.command("rename")
@session_option
@click.option("--name", required=True, help="New order name.")
def builder_rename(session_id: str, name: str) -> None:
    """Rename the order."""
    _run(session_id, lambda b: b.rename(name))
    click.echo(f"Order renamed to '{name}'")


@click.command("budget")
@session_option
@click.option("--amount", required=True, help="Budget ceiling (e.g. 500.00).")
def builder_budget(session_id: str, amount: str) -> None:
    """Change the order's budget ceiling."""
    _run(session_id, lambda b: b.set_budget(amount))
    click.echo(f"Budget set to ${amount}")


@click.command("status")
@session_option
@click.option(
    "--value", required=True,
    type=click.Choice(["DRAFT", "OPEN", "CLOSED"], case_sensitive=False),
    help="New lifecycle status.",
)
def builder_status(session_id: str, value: str) -> None:
    """Change the order's lifecycle status."""
    _run(session_id, lambda b: b.set_status(value))
    click.echo(f"Status set to {value.upper()}")


@click.command("store")
@session_option
@click.option("--id", "store_id", required=True, help="Store ID.")
def builder_store(session_id: str, store_id: str) -> None:
    """Assign the store of a not-yet-saved order."""
    _run(session_id, lambda b: b.set_store(store_id))
    click.echo(f"Store set to '{store_id}'")


@click.command("save")
@session_option
def builder_save(session_id: str) -> None:
    """Validate and save the order with its line items."""
    result: dict[str, str | None] = {}

    def save(builder: OrderBuilder) -> None:
        result["target"] = builder.save()

    builder = _run(session_id, save)
    target = result.get("target")
    if target is None:
        raise click.ClickException("; ".join(builder.messages) or "Save failed")
    click.echo(f"Saved. Continue at {target}")


@click.command("discard")
@session_option
def builder_discard(session_id: str) -> None:
    """Throw away the builder session without saving."""
    session_store().delete(session_id)
    click.echo(f"Session '{session_id}' discarded.")
