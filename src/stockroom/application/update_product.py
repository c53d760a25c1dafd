"""Application service: Update Product use case (admin)."""

from __future__ import annotations

from stockroom.domain.exceptions import EntityNotFoundError, ValidationError
from stockroom.domain.model.principal import Principal
from stockroom.domain.model.product import Product
from stockroom.domain.model.value_objects import Money
from stockroom.domain.repository.product_repository import ProductRepository

_UNSET = object()


class UpdateProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        principal: Principal,
        product_id: str,
        new_price: str | None = None,
        low_stock_threshold: int | None | object = _UNSET,
    ) -> Product:
        """Update a product's price and/or low-stock threshold.

        Existing orders keep their checkout price. Passing
        ``low_stock_threshold=None`` reverts to the global default.
        """
        principal.require_admin()
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        if new_price is None and low_stock_threshold is _UNSET:
            raise ValidationError("Nothing to update")

        if new_price is not None:
            product.update_price(Money.of(new_price))
        if low_stock_threshold is not _UNSET:
            product.set_threshold(low_stock_threshold)  # type: ignore[arg-type]
        self._product_repo.save(product)
        return product
