"""Application services: order queries."""

from __future__ import annotations

from stockroom.application.dto import OrderDTO, order_to_dto
from stockroom.domain.exceptions import EntityNotFoundError
from stockroom.domain.model.order import OrderStatus
from stockroom.domain.model.principal import Principal
from stockroom.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, principal: Principal, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        principal.require_owner_or_admin(order.user_id)
        return order_to_dto(order)


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def for_user(self, principal: Principal) -> list[OrderDTO]:
        """The caller's own orders, newest first."""
        return [order_to_dto(o) for o in self._order_repo.list_by_user(principal.user_id)]

    def by_status(self, principal: Principal, status: str) -> list[OrderDTO]:
        principal.require_admin()
        orders = self._order_repo.list_by_status(OrderStatus.parse(status))
        return [order_to_dto(o) for o in orders]
