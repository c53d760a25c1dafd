"""CLI commands for the batch ledger and stock levels."""

from __future__ import annotations

import click

from stockroom.application.receive_stock import ReceiveStockHandler
from stockroom.application.show_batches import ShowBatchesHandler
from stockroom.application.show_stock import SendLowStockAlertHandler, ShowStockLevelsHandler
from stockroom.application.update_batch import DeleteBatchHandler, UpdateBatchHandler
from stockroom.domain.exceptions import DomainException
from stockroom.domain.model.principal import Principal
from stockroom.infrastructure.cli.context import acting_user, services


def _display_batches(dtos) -> None:
    if not dtos:
        click.echo("No batches found.")
        return
    click.echo(
        f"{'ID':<14} {'Number':<12} {'Product':<8} {'Left':>6} {'Recv':>6} "
        f"{'Expiry':<11} {'Status':<10}"
    )
    click.echo("-" * 72)
    for b in dtos:
        click.echo(
            f"{b.id:<14} {b.batch_number:<12} {b.product_id:<8} {b.quantity_remaining:>6} "
            f"{b.quantity_received:>6} {b.expiry_date:<11} {b.status:<10}"
        )


@click.command("receive")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units received.")
@click.option("--expiry", required=True, type=click.DateTime(["%Y-%m-%d"]), help="Expiry date.")
@click.option("--supplier", "supplier_id", required=True, help="Supplier ID.")
@click.option("--cost", required=True, help="Unit cost price.")
@click.option("--selling-price", default=None, help="Unit selling price (defaults to product price).")
@click.option("--number", "batch_number", default=None, help="Batch number.")
@click.option("--manufactured", type=click.DateTime(["%Y-%m-%d"]), default=None, help="Manufacturing date.")
@acting_user
def batch_receive(
    principal: Principal,
    product_id: str,
    quantity: int,
    expiry,
    supplier_id: str,
    cost: str,
    selling_price: str | None,
    batch_number: str | None,
    manufactured,
) -> None:
    """Record a stock receipt as a new batch."""
    handler = ReceiveStockHandler(services().ledger)

    try:
        dto = handler.handle(
            principal,
            product_id=product_id,
            quantity=quantity,
            expiry_date=expiry.date(),
            supplier_id=supplier_id,
            cost_price=cost,
            selling_price=selling_price,
            batch_number=batch_number,
            manufacturing_date=manufactured.date() if manufactured else None,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch {dto.batch_number} ({dto.id}) received: {dto.quantity_received} units")


@click.command("show")
@click.option("--id", "batch_id", required=True, help="Batch ID.")
def batch_show(batch_id: str) -> None:
    """Show a single batch."""
    handler = ShowBatchesHandler(services().ledger, services().products)

    try:
        dto = handler.get(batch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_batches([dto])


@click.command("list")
@click.option("--product", "product_id", default=None, help="Only batches of this product.")
@click.option("--status", default=None, help="Only active, expired or exhausted batches.")
def batch_list(product_id: str | None, status: str | None) -> None:
    """List batches of a product or batches in a given status."""
    if (product_id is None) == (status is None):
        raise click.UsageError("Give exactly one of --product or --status")
    handler = ShowBatchesHandler(services().ledger, services().products)

    try:
        dtos = handler.for_product(product_id) if product_id else handler.by_status(status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_batches(dtos)


@click.command("update")
@click.option("--id", "batch_id", required=True, help="Batch ID.")
@click.option("--number", "batch_number", default=None, help="New batch number.")
@click.option("--cost", default=None, help="New unit cost price.")
@click.option("--selling-price", default=None, help="New unit selling price.")
@acting_user
def batch_update(
    principal: Principal,
    batch_id: str,
    batch_number: str | None,
    cost: str | None,
    selling_price: str | None,
) -> None:
    """Edit a batch's number or prices."""
    handler = UpdateBatchHandler(services().ledger)

    try:
        dto = handler.handle(principal, batch_id, batch_number, cost, selling_price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch {dto.batch_number} updated")


@click.command("delete")
@click.option("--id", "batch_id", required=True, help="Batch ID.")
@acting_user
def batch_delete(principal: Principal, batch_id: str) -> None:
    """Delete a batch that has not been allocated from."""
    handler = DeleteBatchHandler(services().ledger)

    try:
        handler.handle(principal, batch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Batch {batch_id} deleted")


@click.command("levels")
def stock_levels() -> None:
    """Show stock on hand per product."""
    svc = services()
    lines = ShowStockLevelsHandler(svc.ledger, svc.products, svc.monitor).handle()

    if not lines:
        click.echo("No products found.")
        return

    click.echo(f"{'Product':<20} {'On hand':>8} {'Threshold':>10} {'':>4}")
    click.echo("-" * 45)
    for line in lines:
        flag = "LOW" if line.is_low else ""
        click.echo(
            f"{line.product_name:<20} {line.total_remaining:>8} {line.threshold:>10} {flag:>4}"
        )


@click.command("alert")
@acting_user
def stock_alert(principal: Principal) -> None:
    """Send one low-stock alert listing every product below threshold."""
    svc = services()
    handler = SendLowStockAlertHandler(svc.ledger, svc.products, svc.monitor)

    try:
        items = handler.handle(principal)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not items:
        click.echo("No products are below their threshold.")
        return
    click.echo(f"Low-stock alert sent for {len(items)} product(s):")
    for item in items:
        click.echo(f"  {item.name}: {item.current_stock} (threshold {item.threshold})")
