"""CLI commands for products and suppliers."""

from __future__ import annotations

import click

from stockroom.application.add_product import AddProductHandler, AddSupplierHandler
from stockroom.application.update_product import UpdateProductHandler
from stockroom.domain.exceptions import DomainException
from stockroom.domain.model.principal import Principal
from stockroom.infrastructure.cli.context import acting_user, services


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--brand", default="", help="Brand name.")
@click.option("--threshold", type=int, default=None, help="Low-stock threshold.")
@acting_user
def product_add(
    principal: Principal, name: str, price: str, brand: str, threshold: int | None
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=services().products)

    try:
        product = handler.handle(principal, name, price, brand, threshold)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    products = services().products.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Brand':<14} {'Price':>12} {'Threshold':>10}")
    click.echo("-" * 66)
    for p in products:
        threshold = "default" if p.low_stock_threshold is None else str(p.low_stock_threshold)
        click.echo(f"{p.id:<6} {p.name:<20} {p.brand:<14} {str(p.price):>12} {threshold:>10}")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", default=None, help="New price (e.g. 29.99).")
@click.option("--threshold", type=int, default=None, help="New low-stock threshold.")
@click.option("--default-threshold", is_flag=True, help="Revert to the global threshold.")
@acting_user
def product_update(
    principal: Principal,
    product_id: str,
    price: str | None,
    threshold: int | None,
    default_threshold: bool,
) -> None:
    """Update a product's price or low-stock threshold."""
    handler = UpdateProductHandler(product_repo=services().products)
    kwargs: dict = {}
    if price is not None:
        kwargs["new_price"] = price
    if default_threshold:
        kwargs["low_stock_threshold"] = None
    elif threshold is not None:
        kwargs["low_stock_threshold"] = threshold

    try:
        product = handler.handle(principal, product_id, **kwargs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} updated (price={product.price})")


@click.command("add")
@click.option("--name", required=True, help="Supplier name.")
@click.option("--email", default="", help="Contact email.")
@acting_user
def supplier_add(principal: Principal, name: str, email: str) -> None:
    """Register a supplier."""
    handler = AddSupplierHandler(supplier_repo=services().suppliers)

    try:
        supplier = handler.handle(principal, name, email)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Supplier #{supplier.id} '{supplier.name}' added")
