import logging

from exceptions.cart import InvalidQuantityException
from models.cart import CartLineDTO, CartSnapshotDTO, ProductSnapshotDTO
from models.product import ProductDTO
from services.pricing import PricingService

logger = logging.getLogger(__name__)


def clamp_quantity(quantity: int, stock: int) -> int:
    """Clamp a requested quantity into [1, stock]."""
    return max(1, min(stock, quantity))


class CartStore:
    """
    In-memory cart of one buyer session.

    Construct one instance per session (empty cart), call clear() on logout
    or after a successful order. Lines are keyed by product id and keep
    insertion order. Totals are computed on every read, never stored, so
    they cannot drift from the lines.

    The cart is client state: checkout never trusts its prices or stock,
    see OrderService.create_order().
    """

    def __init__(self, user_id: int | None = None):
        self.user_id = user_id
        self._lines: dict[int, CartLineDTO] = {}

    def add_line(self, product: ProductDTO, quantity: int) -> CartLineDTO:
        """
        Add a product, or replace the quantity of its existing line.

        The quantity is clamped to [1, product.stock]. The product data
        passed in becomes the line's snapshot.

        Raises:
            InvalidQuantityException: If the product has no stock
            PricingConfigurationException: If the product has no price tiers
        """
        if product.stock <= 0:
            raise InvalidQuantityException(product_id=product.id, requested=quantity, available=0)

        quantity_selected = clamp_quantity(quantity, product.stock)
        if quantity_selected != quantity:
            logger.debug(f"Cart: quantity for product {product.id} clamped {quantity} -> {quantity_selected}")

        snapshot = ProductSnapshotDTO(
            name=product.name or "",
            stock=product.stock,
            price_tiers=[tier.model_copy() for tier in product.price_tiers],
        )
        line = CartLineDTO(
            product_id=product.id,
            quantity_selected=quantity_selected,
            unit_price_at_selection=PricingService.resolve_price(snapshot.price_tiers, quantity_selected),
            product_snapshot=snapshot,
        )
        # Re-assigning an existing key keeps the line's position
        self._lines[product.id] = line
        return line

    def update_quantity(self, product_id: int, quantity: int) -> CartLineDTO | None:
        """
        Change the quantity of a line and re-resolve its unit price.

        Unknown product ids are ignored: the UI may send a stale update
        for a line that was just removed.

        Returns:
            The updated line, or None if the product is not in the cart
        """
        line = self._lines.get(product_id)
        if line is None:
            return None

        quantity_selected = clamp_quantity(quantity, line.product_snapshot.stock)
        updated = line.model_copy(update={
            "quantity_selected": quantity_selected,
            "unit_price_at_selection": PricingService.resolve_price(
                line.product_snapshot.price_tiers, quantity_selected
            ),
        })
        self._lines[product_id] = updated
        return updated

    def remove_line(self, product_id: int) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def get_line(self, product_id: int) -> CartLineDTO | None:
        return self._lines.get(product_id)

    @property
    def lines(self) -> list[CartLineDTO]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity_selected for line in self._lines.values())

    @property
    def total(self) -> float:
        return round(sum(line.quantity_selected * line.unit_price_at_selection for line in self._lines.values()), 2)

    def snapshot(self) -> CartSnapshotDTO:
        """Deep copy of the current lines for checkout; later cart edits don't affect it."""
        return CartSnapshotDTO(lines=[line.model_copy(deep=True) for line in self._lines.values()])

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id: int) -> bool:
        return product_id in self._lines
