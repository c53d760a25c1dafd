import click

from stockroom.config.logging import configure_logging
from stockroom.infrastructure.cli.batch_commands import (
    batch_delete,
    batch_list,
    batch_receive,
    batch_show,
    batch_update,
    stock_alert,
    stock_levels,
)
from stockroom.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from stockroom.infrastructure.cli.order_commands import (
    order_cancel,
    order_checkout,
    order_create,
    order_list,
    order_show,
    order_status,
)
from stockroom.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_update,
    supplier_add,
)


@click.group()
def cli() -> None:
    """Stockroom: batch inventory and orders."""
    configure_logging()


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def supplier() -> None:
    """Manage suppliers."""


@cli.group()
def batch() -> None:
    """Manage stock batches."""


@cli.group()
def stock() -> None:
    """Stock levels and low-stock alerts."""


@cli.group()
def cart() -> None:
    """Manage your cart."""


@cli.group()
def order() -> None:
    """Manage orders."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
supplier.add_command(supplier_add)
batch.add_command(batch_receive)
batch.add_command(batch_show)
batch.add_command(batch_list)
batch.add_command(batch_update)
batch.add_command(batch_delete)
stock.add_command(stock_levels)
stock.add_command(stock_alert)
cart.add_command(cart_show)
cart.add_command(cart_add)
cart.add_command(cart_update)
cart.add_command(cart_remove)
cart.add_command(cart_clear)
order.add_command(order_create)
order.add_command(order_checkout)
order.add_command(order_show)
order.add_command(order_list)
order.add_command(order_status)
order.add_command(order_cancel)
