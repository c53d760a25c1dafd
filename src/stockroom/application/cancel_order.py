"""Application service: Cancel Order use case.

Open to the order's owner and to admins. Pending and processing orders
give their allocated units back to the batches they came from; shipped
and delivered orders cannot be cancelled.
"""

from __future__ import annotations

from stockroom.application.dto import OrderDTO, order_to_dto
from stockroom.domain.model.principal import Principal
from stockroom.domain.service.order_state_machine import OrderStateMachine


class CancelOrderHandler:

    def __init__(self, state_machine: OrderStateMachine) -> None:
        self._state_machine = state_machine

    def handle(self, principal: Principal, order_id: int) -> OrderDTO:
        order = self._state_machine.cancel(order_id, principal)
        return order_to_dto(order)
