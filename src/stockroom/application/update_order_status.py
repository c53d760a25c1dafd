"""Application service: Update Order Status use case (admin)."""

from __future__ import annotations

from stockroom.application.dto import OrderDTO, order_to_dto
from stockroom.domain.model.principal import Principal
from stockroom.domain.service.order_state_machine import OrderStateMachine


class UpdateOrderStatusHandler:

    def __init__(self, state_machine: OrderStateMachine) -> None:
        self._state_machine = state_machine

    def handle(self, principal: Principal, order_id: int, status: str) -> OrderDTO:
        """Move an order along PENDING -> PROCESSING -> SHIPPED -> DELIVERED.

        Cancellation through this path follows the same rules as
        CancelOrderHandler.
        """
        order = self._state_machine.transition(order_id, status, principal)
        return order_to_dto(order)
