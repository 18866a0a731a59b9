# barbershop/cart.py

import secrets
import string
from dataclasses import dataclass
from typing import Dict, List

PICKUP_CODE_LENGTH = 12
PICKUP_CODE_ALPHABET = string.ascii_uppercase + string.digits


class CartError(Exception):
    pass


@dataclass
class CartItem:
    product_id: int
    name: str
    price: float
    stock: int
    quantity: int = 1

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


class Cart:
    """Shopping cart that never holds more of a product than is in stock."""

    def __init__(self):
        self._items: Dict[int, CartItem] = {}

    @property
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    def add(self, product_id: int, name: str, price: float, stock: int, quantity: int = 1):
        existing = self._items.get(product_id)
        if existing is not None:
            if existing.quantity + quantity > existing.stock:
                raise CartError(f"Only {existing.stock} of '{name}' in stock")
            existing.quantity += quantity
            return existing

        if stock < 1:
            raise CartError(f"'{name}' is out of stock")
        if quantity > stock:
            raise CartError(f"Only {stock} of '{name}' in stock")
        item = CartItem(product_id=product_id, name=name, price=price, stock=stock, quantity=quantity)
        self._items[product_id] = item
        return item

    def remove(self, product_id: int):
        self._items.pop(product_id, None)

    def update_quantity(self, product_id: int, quantity: int):
        # quantities below one are ignored; use remove() instead
        if quantity < 1:
            return
        item = self._items.get(product_id)
        if item is None:
            return
        if quantity > item.stock:
            raise CartError(f"Only {item.stock} of '{item.name}' in stock")
        item.quantity = quantity

    def clear(self):
        self._items.clear()

    @property
    def total(self) -> float:
        return round(sum(item.subtotal for item in self._items.values()), 2)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items.values())

    def lines(self) -> List[dict]:
        return [
            {
                "product_id": item.product_id,
                "name": item.name,
                "price": item.price,
                "quantity": item.quantity,
            }
            for item in self._items.values()
        ]


def generate_pickup_code(length: int = PICKUP_CODE_LENGTH) -> str:
    return "".join(secrets.choice(PICKUP_CODE_ALPHABET) for _ in range(length))
