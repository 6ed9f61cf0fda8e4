import logging

import config
from exceptions.cart import InvalidQuantityException
from exceptions.pricing import PricingConfigurationException
from models.price_tier import PriceTierDTO, TierPricingResultDTO

logger = logging.getLogger(__name__)


class PricingService:
    """Service for quantity-tiered pricing calculations."""

    @staticmethod
    def find_tier(tiers: list[PriceTierDTO], quantity: int) -> tuple[PriceTierDTO, bool]:
        """
        Find the tier that prices `quantity`.

        Algorithm:
        1. Walk the tiers in table order (no sorting, table order is the contract)
        2. Return the first tier where min_quantity <= quantity and
           (max_quantity is unbounded or quantity <= max_quantity)
        3. If no tier matches, fall back to the last tier of the table and
           treat it as the open-ended bulk rate

        Example with tiers [1-9 → 100, 10+ → 80]:
            - Quantity 9 → tier "1-9", unit price 100
            - Quantity 10 → tier "10+", unit price 80

        Args:
            tiers: Tier table of one product, sorted ascending by min_quantity
            quantity: Requested quantity (>= 1)

        Returns:
            (tier, is_fallback) - is_fallback is True when no tier matched

        Raises:
            InvalidQuantityException: If quantity < 1
            PricingConfigurationException: If the tier table is empty
        """
        if quantity < 1:
            raise InvalidQuantityException(product_id=None, requested=quantity)
        if not tiers:
            raise PricingConfigurationException("tier table is empty")

        for tier in tiers:
            if quantity >= tier.min_quantity and (tier.max_quantity is None or quantity <= tier.max_quantity):
                return tier, False

        # An unreachable quantity is a seller misconfiguration, not a buyer error
        fallback = tiers[-1]
        logger.warning(
            f"No price tier covers quantity {quantity} "
            f"(product {fallback.product_id}), using last tier {PricingService.format_tier_label(fallback)}"
        )
        return fallback, True

    @staticmethod
    def resolve_price(tiers: list[PriceTierDTO], quantity: int) -> float:
        """
        Resolve the unit price for `quantity` from a tier table.

        Pure function: same inputs always produce the same price. The cart
        calls it on every quantity edit and checkout calls it again against
        the current table, so both must agree.

        Raises:
            InvalidQuantityException: If quantity < 1
            PricingConfigurationException: If the tier table is empty
        """
        tier, _ = PricingService.find_tier(tiers, quantity)
        return round(tier.unit_price, 2)

    @staticmethod
    def calculate(tiers: list[PriceTierDTO], quantity: int) -> TierPricingResultDTO:
        """
        Price a quantity: unit price of the matched tier applied to ALL units.

        Returns:
            TierPricingResultDTO with unit price, total and the tier used
        """
        tier, is_fallback = PricingService.find_tier(tiers, quantity)
        unit_price = round(tier.unit_price, 2)
        return TierPricingResultDTO(
            quantity=quantity,
            unit_price=unit_price,
            total=round(unit_price * quantity, 2),
            tier=tier,
            is_fallback=is_fallback,
        )

    @staticmethod
    def validate_tiers(tiers: list[PriceTierDTO], product_id: int | None = None) -> None:
        """
        Reject ill-formed tier tables before they are stored.

        A well-formed table starts at 1, is sorted ascending, has no gaps
        or overlaps, and only its last tier may be unbounded. Reading an
        ill-formed table still works (first match / last-tier fallback),
        this check keeps sellers from creating one.

        Raises:
            PricingConfigurationException: Describing the first problem found
        """
        if not tiers:
            raise PricingConfigurationException("at least one tier is required", product_id)

        for index, tier in enumerate(tiers):
            label = f"tier {index + 1}"
            if tier.min_quantity < 1:
                raise PricingConfigurationException(f"{label} must start at 1 or more", product_id)
            if tier.unit_price < 0:
                raise PricingConfigurationException(f"{label} has a negative price", product_id)
            if tier.max_quantity is not None and tier.max_quantity < tier.min_quantity:
                raise PricingConfigurationException(f"{label} ends before it starts", product_id)

        if tiers[0].min_quantity != 1:
            raise PricingConfigurationException("first tier must start at quantity 1", product_id)

        for index, (previous, current) in enumerate(zip(tiers, tiers[1:]), start=2):
            if previous.max_quantity is None:
                raise PricingConfigurationException(
                    f"tier {index - 1} is unbounded but is followed by another tier", product_id
                )
            if current.min_quantity <= previous.max_quantity:
                raise PricingConfigurationException(f"tier {index} overlaps tier {index - 1}", product_id)
            if current.min_quantity > previous.max_quantity + 1:
                raise PricingConfigurationException(
                    f"quantities {previous.max_quantity + 1}-{current.min_quantity - 1} are not covered", product_id
                )

        if tiers[-1].max_quantity is not None:
            raise PricingConfigurationException("last tier must be unbounded", product_id)

    @staticmethod
    def format_tier_label(tier: PriceTierDTO, unit: str | None = None) -> str:
        """
        Format the quantity range of a tier.

        Example output:
            1-9 pcs.
            10+ pcs.
        """
        unit = unit if unit is not None else config.ITEM_UNIT
        if tier.max_quantity is None:
            return f"{tier.min_quantity}+ {unit}"
        return f"{tier.min_quantity}-{tier.max_quantity} {unit}"

    @staticmethod
    def format_tier_breakdown(pricing_result: TierPricingResultDTO, currency: str | None = None) -> str:
        """
        Format a pricing result for display.

        Example output:
            12 × 80.00 SLE = 960.00 SLE
        """
        currency = currency if currency is not None else config.CURRENCY_SYMBOL
        return (f"{pricing_result.quantity} × {pricing_result.unit_price:.2f} {currency} "
                f"= {pricing_result.total:.2f} {currency}")

    @staticmethod
    def format_available_tiers(
        tiers: list[PriceTierDTO],
        currency: str | None = None,
        unit: str | None = None
    ) -> str | None:
        """
        Format a tier table as a price list for display.

        Example output:
            ```
                1-9 pcs.:  100.00 SLE
                10+ pcs.:   80.00 SLE
            ```

        Returns:
            Formatted string, or None if the table is empty
        """
        if not tiers:
            return None

        currency = currency if currency is not None else config.CURRENCY_SYMBOL
        lines = []
        for tier in tiers:
            range_str = PricingService.format_tier_label(tier, unit)
            lines.append(f"  {range_str:>12}: {tier.unit_price:>8.2f} {currency}")
        return "\n".join(lines)
