"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from rental.application.change_order_status import ChangeOrderStatusHandler
from rental.application.create_order import CreateOrderHandler
from rental.application.dto import OrderDTO, OrderRequest, OrderUpdateRequest
from rental.application.list_orders import ListOrdersHandler
from rental.application.show_order_history import ShowOrderHistoryHandler
from rental.application.update_order import UpdateOrderHandler
from rental.domain.exceptions import DomainException
from rental.domain.model.order import OrderStatus, StatusFilter
from rental.infrastructure.bootstrap import (
    equipment_repository,
    equipment_status_repository,
    kind_repository,
    order_repository,
    order_status_repository,
    store,
    user_repository,
)

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]


def _as_utc(moment: datetime) -> datetime:
    """Command-line dates carry no zone; they are read as UTC."""
    return moment.replace(tzinfo=timezone.utc)


def _parse_equipment(raw: str) -> list[int]:
    """Parse '3,7,9' into a list of equipment IDs."""
    ids: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            raise click.BadParameter(f"Invalid equipment ID '{part}'.")
    return ids


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Owner:     #{dto.owner_id}{'  (first order)' if dto.is_first else ''}")
    click.echo(f"Period:    {dto.rent_start} -> {dto.rent_end}")
    click.echo(f"Quantity:  {dto.quantity}")
    click.echo(f"Equipment: {', '.join(f'#{i}' for i in dto.equipment_ids)}")
    if dto.description:
        click.echo(f"Notes:     {dto.description}")


@click.command("create")
@click.option("--user", "owner_id", required=True, type=int, help="Owner user ID.")
@click.option("--equipment", required=True, help="Equipment IDs as '1,2,3'.")
@click.option("--start", required=True, type=click.DateTime(DATE_FORMATS), help="Rent start (UTC).")
@click.option("--end", required=True, type=click.DateTime(DATE_FORMATS), help="Rent end (UTC).")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units requested.")
@click.option("--description", default="", help="Free-text note.")
def order_create(
    owner_id: int,
    equipment: str,
    start: datetime,
    end: datetime,
    quantity: int,
    description: str,
) -> None:
    """Reserve equipment for a rental period."""
    request = OrderRequest(
        description=description,
        quantity=quantity,
        rent_start=_as_utc(start),
        rent_end=_as_utc(end),
        equipment_ids=_parse_equipment(equipment),
    )
    handler = CreateOrderHandler(
        tx_manager=store(),
        order_repo=order_repository(),
        order_status_repo=order_status_repository(),
        equipment_repo=equipment_repository(),
        equipment_status_repo=equipment_status_repository(),
        kind_repo=kind_repository(),
        user_repo=user_repository(),
    )

    try:
        dto = handler.handle(owner_id=owner_id, request=request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Order created.")
    _display_order(dto)


@click.command("update")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--user", "acting_user_id", required=True, type=int, help="Acting user ID.")
@click.option("--start", required=True, type=click.DateTime(DATE_FORMATS), help="New rent start (UTC).")
@click.option("--end", required=True, type=click.DateTime(DATE_FORMATS), help="New rent end (UTC).")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units requested.")
@click.option("--description", default="", help="Free-text note.")
def order_update(
    order_id: int,
    acting_user_id: int,
    start: datetime,
    end: datetime,
    quantity: int,
    description: str,
) -> None:
    """Change the period, quantity or note of your own order."""
    request = OrderUpdateRequest(
        description=description,
        quantity=quantity,
        rent_start=_as_utc(start),
        rent_end=_as_utc(end),
    )
    handler = UpdateOrderHandler(
        tx_manager=store(),
        order_repo=order_repository(),
        order_status_repo=order_status_repository(),
        equipment_repo=equipment_repository(),
        kind_repo=kind_repository(),
    )

    try:
        dto = handler.handle(order_id=order_id, acting_user_id=acting_user_id, request=request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Order updated.")
    _display_order(dto)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--set",
    "new_status",
    required=True,
    type=click.Choice([s.value for s in OrderStatus], case_sensitive=False),
    help="Status to move the order to.",
)
@click.option("--user", "acting_user_id", required=True, type=int, help="Acting administrator ID.")
@click.option("--comment", default="", help="Reason recorded in the history.")
def order_status(order_id: int, new_status: str, acting_user_id: int, comment: str) -> None:
    """Move an order along its workflow."""
    handler = ChangeOrderStatusHandler(
        tx_manager=store(),
        order_repo=order_repository(),
        order_status_repo=order_status_repository(),
        equipment_status_repo=equipment_status_repository(),
    )

    try:
        entry = handler.handle(
            order_id=order_id,
            new_status=OrderStatus.parse(new_status),
            acting_user_id=acting_user_id,
            comment=comment,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {entry.status} ({entry.current_date}).")


@click.command("history")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def order_history(order_id: int) -> None:
    """Show the status history of an order, oldest first."""
    handler = ShowOrderHistoryHandler(
        tx_manager=store(),
        order_repo=order_repository(),
        order_status_repo=order_status_repository(),
    )

    try:
        entries = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{'Date':<22} {'Status':<12} {'By':>5}  Comment")
    click.echo("-" * 60)
    for e in entries:
        click.echo(f"{e.current_date:<22} {e.status:<12} {'#' + str(e.acting_user_id):>5}  {e.comment}")


@click.command("list")
@click.option("--user", "owner_id", required=True, type=int, help="Owner user ID.")
@click.option(
    "--status",
    default=StatusFilter.ALL.value,
    show_default=True,
    type=click.Choice([f.value for f in StatusFilter], case_sensitive=False),
    help="Single status, or one of all/active/finished.",
)
@click.option("--limit", type=int, default=None, help="Page size.")
@click.option("--offset", type=int, default=0, show_default=True, help="Rows to skip.")
def order_list(owner_id: int, status: str, limit: int | None, offset: int) -> None:
    """List a user's orders."""
    handler = ListOrdersHandler(
        tx_manager=store(),
        order_repo=order_repository(),
        order_status_repo=order_status_repository(),
    )

    try:
        page = handler.handle(owner_id=owner_id, status=status, limit=limit, offset=offset)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not page.items:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Status':<12} {'Start':<22} {'End':<22} {'Qty':>4}")
    click.echo("-" * 70)
    for o in page.items:
        click.echo(f"{o.id:<6} {o.status:<12} {o.rent_start:<22} {o.rent_end:<22} {o.quantity:>4}")
    click.echo(f"{len(page.items)} of {page.total} order(s)")
