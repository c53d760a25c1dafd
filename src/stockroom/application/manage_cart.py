"""Application services: cart use cases.

Stock checks here are advisory only. They read the current stock level
to warn the customer early; nothing is reserved, and another checkout
may still take the stock first. The binding check happens at checkout.
"""

from __future__ import annotations

from stockroom.application.dto import CartDTO, CartLineDTO
from stockroom.domain.exceptions import EntityNotFoundError, InsufficientStockError
from stockroom.domain.model.cart import Cart
from stockroom.domain.model.value_objects import Money, Quantity
from stockroom.domain.repository.cart_repository import CartRepository
from stockroom.domain.repository.product_repository import ProductRepository
from stockroom.domain.service.allocation_engine import AllocationEngine


class _CartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        engine: AllocationEngine,
    ) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo
        self._engine = engine

    def _load(self, user_id: str) -> Cart:
        return self._cart_repo.get_for_user(user_id) or Cart(user_id=user_id)

    def _soft_check(self, product_id: str, wanted: int) -> None:
        if self._product_repo.get_by_id(product_id) is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        available = self._engine.available(product_id)
        if wanted > available:
            raise InsufficientStockError(product_id, requested=wanted, available=available)

    def _to_dto(self, cart: Cart) -> CartDTO:
        lines = []
        total = Money.zero()
        for line in cart.lines:
            product = self._product_repo.get_by_id(line.product_id)
            if product is None:
                continue
            line_total = product.price * line.quantity
            total = total + line_total
            lines.append(
                CartLineDTO(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=line.quantity,
                    unit_price=str(product.price),
                    line_total=str(line_total),
                )
            )
        return CartDTO(user_id=cart.user_id, lines=lines, total=str(total))


class ShowCartHandler(_CartHandler):

    def handle(self, user_id: str) -> CartDTO:
        """A user without a cart sees an empty one."""
        return self._to_dto(self._load(user_id))


class AddToCartHandler(_CartHandler):

    def handle(self, user_id: str, product_id: str, quantity: int) -> CartDTO:
        cart = self._load(user_id)
        wanted = cart.quantity_of(product_id) + Quantity(quantity).value
        self._soft_check(product_id, wanted)
        cart.add(product_id, quantity)
        self._cart_repo.save(cart)
        return self._to_dto(cart)


class UpdateCartItemHandler(_CartHandler):

    def handle(self, user_id: str, product_id: str, quantity: int) -> CartDTO:
        cart = self._load(user_id)
        if cart.quantity_of(product_id) == 0:
            raise EntityNotFoundError(f"Product '{product_id}' is not in the cart")
        self._soft_check(product_id, Quantity(quantity).value)
        cart.set_quantity(product_id, quantity)
        self._cart_repo.save(cart)
        return self._to_dto(cart)


class RemoveFromCartHandler(_CartHandler):

    def handle(self, user_id: str, product_id: str) -> CartDTO:
        cart = self._load(user_id)
        cart.remove(product_id)
        self._cart_repo.save(cart)
        return self._to_dto(cart)


class ClearCartHandler(_CartHandler):

    def handle(self, user_id: str) -> None:
        self._cart_repo.delete(user_id)
