from pydantic import BaseModel

from models.price_tier import PriceTierDTO


class ProductSnapshotDTO(BaseModel):
    """Product data captured when the buyer selected it; may be stale at checkout."""
    name: str
    stock: int
    price_tiers: list[PriceTierDTO]


class CartLineDTO(BaseModel):
    product_id: int
    quantity_selected: int
    unit_price_at_selection: float
    product_snapshot: ProductSnapshotDTO

    @property
    def line_total(self) -> float:
        return round(self.quantity_selected * self.unit_price_at_selection, 2)


class CartSnapshotDTO(BaseModel):
    """Read-only copy of a cart handed to checkout."""
    lines: list[CartLineDTO] = []

    @property
    def item_count(self) -> int:
        return sum(line.quantity_selected for line in self.lines)

    @property
    def total(self) -> float:
        return round(sum(line.quantity_selected * line.unit_price_at_selection for line in self.lines), 2)
