"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from stockroom.application.cancel_order import CancelOrderHandler
from stockroom.application.create_order import CheckoutHandler, CreateOrderHandler
from stockroom.application.dto import OrderItemSpec
from stockroom.application.show_order import ListOrdersHandler, ShowOrderHandler
from stockroom.application.update_order_status import UpdateOrderStatusHandler
from stockroom.domain.exceptions import DomainException
from stockroom.domain.model.principal import Principal
from stockroom.infrastructure.cli.context import acting_user, services


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:3,2:5' (product id : quantity) into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(OrderItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _display_order(dto) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.shipping_address:
        click.echo(f"Ship to:  {dto.shipping_address}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>12} {'Total':>12}  Batches")
    click.echo(f"  {'-'*66}")
    for line in dto.lines:
        batches = ", ".join(f"{a.batch_id}x{a.qty_taken}" for a in line.allocations)
        click.echo(
            f"  {line.product_name:<20} {line.quantity:>5} {line.unit_price:>12} "
            f"{line.line_total:>12}  {batches}"
        )
    click.echo(f"  {'-'*66}")
    click.echo(f"  {'Order Total':<27} {dto.total:>24}")
    click.echo()
    for change in dto.history:
        click.echo(f"  {change.at}  {change.status:<11} by {change.actor}")


@click.command("create")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--ship-to", "shipping_address", default="", help="Shipping address.")
@acting_user
def order_create(principal: Principal, items: str, shipping_address: str) -> None:
    """Place an order for explicit items (bypasses the cart)."""
    specs = _parse_items(items)
    handler = CreateOrderHandler(services().state_machine)

    try:
        dto = handler.handle(principal, specs, shipping_address)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("checkout")
@click.option("--ship-to", "shipping_address", default="", help="Shipping address.")
@acting_user
def order_checkout(principal: Principal, shipping_address: str) -> None:
    """Turn the cart into an order."""
    svc = services()
    handler = CheckoutHandler(cart_repo=svc.carts, state_machine=svc.state_machine)

    try:
        dto = handler.handle(principal, shipping_address)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@acting_user
def order_show(principal: Principal, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=services().orders)

    try:
        dto = handler.handle(principal, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--status", default=None, help="All orders in this status (admin).")
@acting_user
def order_list(principal: Principal, status: str | None) -> None:
    """List your orders, or every order in a status."""
    handler = ListOrdersHandler(order_repo=services().orders)

    try:
        dtos = handler.by_status(principal, status) if status else handler.for_user(principal)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not dtos:
        click.echo("No orders found.")
        return
    for dto in dtos:
        click.echo(f"#{dto.id:<5} {dto.status:<11} {dto.user_id:<12} {dto.total:>14}  {dto.created_at}")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--to", "status", required=True, help="Target status.")
@acting_user
def order_status(principal: Principal, order_id: int, status: str) -> None:
    """Move an order to another status (admin)."""
    handler = UpdateOrderStatusHandler(services().state_machine)

    try:
        dto = handler.handle(principal, order_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is {dto.status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@acting_user
def order_cancel(principal: Principal, order_id: int) -> None:
    """Cancel an order and return its stock to the batches."""
    handler = CancelOrderHandler(services().state_machine)

    try:
        handler.handle(principal, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")
