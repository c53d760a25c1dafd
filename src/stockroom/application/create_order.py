"""Application services: Create Order and Checkout use cases.

Checkout turns the caller's cart into an order. The cart is only
cleared once the order has been stored; a failed checkout leaves it as
it was so the customer can adjust and retry.
"""

from __future__ import annotations

from stockroom.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from stockroom.domain.exceptions import ValidationError
from stockroom.domain.model.order import LineRequest
from stockroom.domain.model.principal import Principal
from stockroom.domain.repository.cart_repository import CartRepository
from stockroom.domain.service.order_state_machine import OrderStateMachine


class CreateOrderHandler:

    def __init__(self, state_machine: OrderStateMachine) -> None:
        self._state_machine = state_machine

    def handle(
        self,
        principal: Principal,
        item_specs: list[OrderItemSpec],
        shipping_address: str = "",
    ) -> OrderDTO:
        """Place an order for the given lines on the caller's behalf."""
        order = self._state_machine.create_order(
            user_id=principal.user_id,
            requests=[LineRequest(s.product_id, s.quantity) for s in item_specs],
            actor=principal.user_id,
            shipping_address=shipping_address,
        )
        return order_to_dto(order)


class CheckoutHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        state_machine: OrderStateMachine,
    ) -> None:
        self._cart_repo = cart_repo
        self._state_machine = state_machine

    def handle(self, principal: Principal, shipping_address: str = "") -> OrderDTO:
        cart = self._cart_repo.get_for_user(principal.user_id)
        if cart is None or cart.is_empty:
            raise ValidationError("Your cart is empty")

        order = self._state_machine.create_order(
            user_id=principal.user_id,
            requests=[LineRequest(line.product_id, line.quantity) for line in cart.lines],
            actor=principal.user_id,
            shipping_address=shipping_address,
        )
        self._cart_repo.delete(principal.user_id)
        return order_to_dto(order)
