# backend/services/cart.py
"""In-memory shopping cart for a single browsing session."""
from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass(frozen=True)
class CartExtra:
    id: str
    name: str
    price: float


@dataclass
class CartLine:
    product_id: int
    name: str
    price: float
    quantity: int = 1
    image: Optional[str] = None
    extras: List[CartExtra] = field(default_factory=list)

    @property
    def key(self) -> str:
        # Same product with a different set of extras is a separate line
        extra_ids = ",".join(sorted(e.id for e in self.extras)) or "no-extras"
        return f"{self.product_id}-{extra_ids}"

    @property
    def unit_price(self) -> float:
        return self.price + sum(e.price for e in self.extras)

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity


Listener = Callable[["Cart"], None]


class Cart:
    def __init__(self):
        self._lines: List[CartLine] = []
        self._listeners: List[Listener] = []

    @property
    def items(self) -> List[CartLine]:
        return list(self._lines)

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def total_price(self) -> float:
        return sum(line.subtotal for line in self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback fired after every mutation. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    def get(self, key: str) -> Optional[CartLine]:
        return next((line for line in self._lines if line.key == key), None)

    def add_item(self, line: CartLine, quantity: int = 1) -> CartLine:
        if quantity <= 0:
            raise ValueError("quantity must be positive")
        existing = self.get(line.key)
        if existing:
            existing.quantity += quantity
        else:
            existing = CartLine(
                product_id=line.product_id,
                name=line.name,
                price=line.price,
                quantity=quantity,
                image=line.image,
                extras=list(line.extras),
            )
            self._lines.append(existing)
        self._notify()
        return existing

    def remove_item(self, key: str) -> None:
        before = len(self._lines)
        self._lines = [line for line in self._lines if line.key != key]
        if len(self._lines) != before:
            self._notify()

    def set_quantity(self, key: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(key)
            return
        line = self.get(key)
        if line is None:
            raise KeyError(key)
        line.quantity = quantity
        self._notify()

    def clear(self) -> None:
        self._lines = []
        self._notify()
