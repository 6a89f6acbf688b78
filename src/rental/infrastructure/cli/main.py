import click

from rental.infrastructure.cli.catalog_commands import (
    equipment_add,
    kind_add,
    kind_list,
    user_add,
)
from rental.infrastructure.cli.order_commands import (
    order_create,
    order_history,
    order_list,
    order_status,
    order_update,
)
from rental.infrastructure.cli.sweep_commands import sweep_run, sweep_serve
from rental.infrastructure.config import get_settings
from rental.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """Rental: equipment reservation administration"""
    configure_logging(get_settings())


@cli.group()
def user() -> None:
    """Manage users."""


@cli.group()
def kind() -> None:
    """Manage equipment kinds."""


@cli.group()
def equipment() -> None:
    """Manage equipment units."""


@cli.group()
def order() -> None:
    """Manage rental orders."""


@cli.group()
def sweep() -> None:
    """Run the overdue sweep."""


# Register subcommands
user.add_command(user_add)
kind.add_command(kind_add)
kind.add_command(kind_list)
equipment.add_command(equipment_add)
order.add_command(order_create)
order.add_command(order_update)
order.add_command(order_status)
order.add_command(order_history)
order.add_command(order_list)
sweep.add_command(sweep_run)
sweep.add_command(sweep_serve)
