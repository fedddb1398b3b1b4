from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
from pydantic import BaseModel

VARIANT_SEP = "-"


def variant_key(color: str, size: str) -> str:
    return f"{color.strip()}{VARIANT_SEP}{size.strip()}"


def parse_variant_key(key: str) -> Tuple[str, str]:
    """
    Split a "{color}-{size}" stock key.
    Anything that does not split into exactly two parts comes back as ("", "")
    so it never shows up as an available color or size.
    """
    parts = key.split(VARIANT_SEP)
    if len(parts) != 2:
        return "", ""
    return parts[0].strip(), parts[1].strip()


def _units(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class VariantSelection(BaseModel):
    color: str = ""
    size: str = ""


class VariantResolver:
    """Availability of color/size combinations for one product."""

    def __init__(self, colors: Optional[Iterable[str]] = None, sizes: Optional[Iterable[str]] = None,
                 stock_by_variant: Optional[Mapping[str, Any]] = None):
        self.colors: List[str] = list(colors or [])
        self.sizes: List[str] = list(sizes or [])
        self.stock_by_variant: Dict[str, Any] = dict(stock_by_variant or {})

    @classmethod
    def from_product(cls, product) -> "VariantResolver":
        if isinstance(product, Mapping):
            return cls(product.get("colors"), product.get("sizes"), product.get("stock_by_variant"))
        return cls(product.colors, product.sizes, product.stock_by_variant)

    @property
    def tracks_variants(self) -> bool:
        # products without a map (or with an empty one) are unconstrained
        return bool(self.stock_by_variant)

    def _in_stock_pairs(self):
        for key, units in self.stock_by_variant.items():
            if _units(units) > 0:
                yield parse_variant_key(key)

    def stock_for(self, color: str, size: str) -> Optional[int]:
        if not self.tracks_variants:
            return None
        key = variant_key(color, size)
        if key not in self.stock_by_variant:
            return None
        return _units(self.stock_by_variant[key])

    def has_stock(self, color: str, size: str) -> bool:
        if not self.tracks_variants:
            return True
        units = self.stock_for(color, size)
        return units is not None and units > 0

    def available_colors(self, selected_size: Optional[str] = None) -> List[str]:
        selected_size = (selected_size or "").strip()
        if not self.tracks_variants:
            return list(self.colors)
        if selected_size:
            with_stock = {c for c, s in self._in_stock_pairs() if c and s == selected_size}
        else:
            with_stock = {c for c, _ in self._in_stock_pairs() if c}
        return [c for c in self.colors if c in with_stock]

    def available_sizes(self, selected_color: Optional[str] = None) -> List[str]:
        selected_color = (selected_color or "").strip()
        if not self.tracks_variants:
            return list(self.sizes)
        if selected_color:
            with_stock = {s for c, s in self._in_stock_pairs() if s and c == selected_color}
        else:
            with_stock = {s for _, s in self._in_stock_pairs() if s}
        return [s for s in self.sizes if s in with_stock]

    def initial_selection(self) -> VariantSelection:
        colors = self.available_colors("")
        sizes = self.available_sizes("")
        return VariantSelection(color=colors[0] if colors else "", size=sizes[0] if sizes else "")

    def select_size(self, current: VariantSelection, size: str) -> VariantSelection:
        color = current.color
        if color and not self.has_stock(color, size):
            colors = self.available_colors(size)
            color = colors[0] if colors else ""
        return VariantSelection(color=color, size=size)

    def select_color(self, current: VariantSelection, color: str) -> VariantSelection:
        size = current.size
        if size and not self.has_stock(color, size):
            sizes = self.available_sizes(color)
            size = sizes[0] if sizes else ""
        return VariantSelection(color=color, size=size)

