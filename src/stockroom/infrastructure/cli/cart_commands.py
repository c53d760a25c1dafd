"""CLI commands for the shopping cart."""

from __future__ import annotations

import click

from stockroom.application.manage_cart import (
    AddToCartHandler,
    ClearCartHandler,
    RemoveFromCartHandler,
    ShowCartHandler,
    UpdateCartItemHandler,
)
from stockroom.domain.exceptions import DomainException
from stockroom.domain.model.principal import Principal
from stockroom.infrastructure.cli.context import acting_user, services


def _cart_handler(cls):
    svc = services()
    return cls(cart_repo=svc.carts, product_repo=svc.products, engine=svc.engine)


def _display_cart(dto) -> None:
    if not dto.lines:
        click.echo("Your cart is empty.")
        return
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*51}")
    for line in dto.lines:
        click.echo(
            f"  {line.product_name:<20} {line.quantity:>5} {line.unit_price:>12} {line.line_total:>12}"
        )
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Cart Total':<27} {dto.total:>24}")


@click.command("show")
@acting_user
def cart_show(principal: Principal) -> None:
    """Show the acting user's cart."""
    _display_cart(_cart_handler(ShowCartHandler).handle(principal.user_id))


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units to add.")
@acting_user
def cart_add(principal: Principal, product_id: str, quantity: int) -> None:
    """Add a product to the cart."""
    try:
        dto = _cart_handler(AddToCartHandler).handle(principal.user_id, product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("update")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New quantity.")
@acting_user
def cart_update(principal: Principal, product_id: str, quantity: int) -> None:
    """Change the quantity of a product already in the cart."""
    try:
        dto = _cart_handler(UpdateCartItemHandler).handle(principal.user_id, product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("remove")
@click.option("--product", "product_id", required=True, help="Product ID.")
@acting_user
def cart_remove(principal: Principal, product_id: str) -> None:
    """Remove a product from the cart."""
    try:
        dto = _cart_handler(RemoveFromCartHandler).handle(principal.user_id, product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("clear")
@acting_user
def cart_clear(principal: Principal) -> None:
    """Empty the cart."""
    _cart_handler(ClearCartHandler).handle(principal.user_id)
    click.echo("Cart cleared.")
