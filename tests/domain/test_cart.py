"""Unit tests for the Cart aggregate."""

import pytest

from stockroom.domain.exceptions import EntityNotFoundError, ValidationError
from stockroom.domain.model.cart import Cart


class TestCart:

    def test_add_merges_same_product(self):
        cart = Cart("u1")
        cart.add("p1", 2)
        assert cart.add("p1", 3) == 5
        assert len(cart.lines) == 1

    def test_lines_keep_insertion_order(self):
        cart = Cart("u1")
        cart.add("p2", 1)
        cart.add("p1", 1)
        assert [l.product_id for l in cart.lines] == ["p2", "p1"]

    def test_set_quantity_requires_existing_line(self):
        with pytest.raises(EntityNotFoundError, match="not in the cart"):
            Cart("u1").set_quantity("p1", 2)

    def test_non_positive_quantity_rejected(self):
        cart = Cart("u1")
        with pytest.raises(ValidationError):
            cart.add("p1", 0)

    def test_remove_and_clear(self):
        cart = Cart("u1")
        cart.add("p1", 1)
        cart.add("p2", 1)
        cart.remove("p1")
        assert cart.quantity_of("p1") == 0
        cart.clear()
        assert cart.is_empty
