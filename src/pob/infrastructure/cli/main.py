import logging

import click

from pob.infrastructure.cli.builder_commands import (
    builder_apply,
    builder_budget,
    builder_discard,
    builder_filter,
    builder_first,
    builder_last,
    builder_next,
    builder_open,
    builder_prev,
    builder_qty,
    builder_rename,
    builder_save,
    builder_show,
    builder_status,
    builder_store,
)
from pob.infrastructure.cli.lot_commands import lot_add, lot_list
from pob.infrastructure.cli.order_commands import order_show


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log progress to stderr.")
def cli(verbose: bool) -> None:
    """POB — Purchase Order Builder"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def lot() -> None:
    """Manage the lot catalog."""


@cli.group()
def order() -> None:
    """Inspect saved orders."""


@cli.group()
def builder() -> None:
    """Build a purchase order page by page."""


# Register subcommands
lot.add_command(lot_add)
lot.add_command(lot_list)
order.add_command(order_show)
for command in (
    builder_open,
    builder_show,
    builder_filter,
    builder_apply,
    builder_first,
    builder_prev,
    builder_next,
    builder_last,
    builder_qty,
    builder_rename,
    builder_budget,
    builder_status,
    builder_store,
    builder_save,
    builder_discard,
):
    builder.add_command(command)
