"""CLI commands for users, equipment kinds and equipment units."""

from __future__ import annotations

import click

from rental.application.add_equipment import AddEquipmentHandler
from rental.application.add_kind import AddKindHandler
from rental.application.register_user import RegisterUserHandler
from rental.domain.exceptions import DomainException
from rental.infrastructure.bootstrap import (
    equipment_repository,
    kind_repository,
    store,
    user_repository,
)


@click.command("add")
@click.option("--name", required=True, help="User name.")
def user_add(name: str) -> None:
    """Register a user."""
    handler = RegisterUserHandler(tx_manager=store(), user_repo=user_repository())

    try:
        user = handler.handle(name=name)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"User #{user.id} '{user.name}' registered")


@click.command("add")
@click.option("--name", required=True, help="Kind name.")
@click.option("--max-time", required=True, type=int, help="Longest rental, in seconds.")
@click.option("--max-units", required=True, type=int, help="Most units per order.")
def kind_add(name: str, max_time: int, max_units: int) -> None:
    """Add an equipment kind with its reservation limits."""
    handler = AddKindHandler(tx_manager=store(), kind_repo=kind_repository())

    try:
        kind = handler.handle(
            name=name,
            max_reservation_time=max_time,
            max_reservation_units=max_units,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Kind #{kind.id} '{kind.name}' added")


@click.command("list")
def kind_list() -> None:
    """List all equipment kinds."""
    try:
        with store().begin() as tx:
            kinds = kind_repository().list_all(tx)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not kinds:
        click.echo("No kinds found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Max seconds':>12} {'Max units':>10}")
    click.echo("-" * 51)
    for k in kinds:
        click.echo(f"{k.id:<6} {k.name:<20} {k.max_reservation_time:>12} {k.max_reservation_units:>10}")


@click.command("add")
@click.option("--name", required=True, help="Equipment name.")
@click.option("--kind", "kind_id", required=True, type=int, help="Kind ID.")
def equipment_add(name: str, kind_id: int) -> None:
    """Add an equipment unit."""
    handler = AddEquipmentHandler(
        tx_manager=store(),
        equipment_repo=equipment_repository(),
        kind_repo=kind_repository(),
    )

    try:
        equipment = handler.handle(name=name, kind_id=kind_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Equipment #{equipment.id} '{equipment.name}' added")
