from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple
from pydantic import BaseModel, Field
from storefront.common.utils import to_money

Listener = Callable[["CartStore"], None]


class ProductSnapshot(BaseModel):
    """What the cart remembers about a product when it was added."""
    id: int
    name: str
    price: Decimal
    image: Optional[str] = None
    colors: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    stock_by_variant: Optional[Dict[str, int]] = None


def make_cart_item_id(product_id: int, size: str, color: str) -> str:
    return f"{product_id}-{size}-{color}"


class CartLine(BaseModel):
    product: ProductSnapshot
    quantity: int = 1
    selected_size: str = ""
    selected_color: str = ""

    @property
    def cart_item_id(self) -> str:
        return make_cart_item_id(self.product.id, self.selected_size, self.selected_color)

    @property
    def subtotal(self) -> Decimal:
        return to_money(self.product.price * self.quantity)

    def to_payload(self) -> Dict[str, Any]:
        # shape accepted by POST /api/cart/create
        return {
            "productId": self.product.id,
            "quantity": self.quantity,
            "selectedSize": self.selected_size or None,
            "selectedColor": self.selected_color or None,
        }


class CartStore:
    """
    In-memory cart for one browsing session.
    Lines are keyed by "{productId}-{size}-{color}" , adding the same key again bumps
    the quantity instead of appending a second line. No stock checks happen here.
    """

    def __init__(self, lines: Optional[List[CartLine]] = None):
        self._lines: List[CartLine] = list(lines or [])
        self._listeners: List[Listener] = []

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    def _index_of(self, cart_item_id: str) -> Optional[int]:
        for i, line in enumerate(self._lines):
            if line.cart_item_id == cart_item_id:
                return i
        return None

    def add(self, product: ProductSnapshot, size: str = "", color: str = "") -> CartLine:
        idx = self._index_of(make_cart_item_id(product.id, size, color))
        if idx is not None:
            line = self._lines[idx].model_copy(update={"quantity": self._lines[idx].quantity + 1})
            self._lines[idx] = line
        else:
            line = CartLine(product=product, quantity=1, selected_size=size, selected_color=color)
            self._lines.append(line)
        self._notify()
        return line

    def remove(self, cart_item_id: str) -> bool:
        idx = self._index_of(cart_item_id)
        if idx is None:
            return False
        del self._lines[idx]
        self._notify()
        return True

    def set_quantity(self, cart_item_id: str, quantity: int) -> bool:
        if quantity <= 0:
            return self.remove(cart_item_id)
        idx = self._index_of(cart_item_id)
        if idx is None:
            return False
        self._lines[idx] = self._lines[idx].model_copy(update={"quantity": quantity})
        self._notify()
        return True

    def clear(self):
        self._lines = []
        self._notify()

    def replace(self, lines: List[CartLine]):
        self._lines = list(lines)
        self._notify()

    def total_price(self) -> Decimal:
        return to_money(sum((line.product.price * line.quantity for line in self._lines), Decimal("0")))

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def to_payload(self) -> List[Dict[str, Any]]:
        return [line.to_payload() for line in self._lines]
