"""
Tests for the marketplace exception hierarchy in exceptions/
"""
import pytest

from exceptions import (
    MarketplaceException,
    CartException,
    EmptyCartException,
    InvalidQuantityException,
    PricingException,
    PricingConfigurationException,
    ProductException,
    ProductNotFoundException,
    ProductUnavailableException,
    ProductOwnershipException,
    OrderException,
    OrderNotFoundException,
    InsufficientStockException,
    InvalidStatusTransitionException,
    OrderValidationException,
    OrderOwnershipException,
)


class TestHierarchy:

    @pytest.mark.parametrize("exc,parent", [
        (EmptyCartException(), CartException),
        (InvalidQuantityException(1, 0), CartException),
        (PricingConfigurationException("empty"), PricingException),
        (ProductNotFoundException(1), ProductException),
        (ProductUnavailableException(1), ProductException),
        (ProductOwnershipException(1, 2), ProductException),
        (OrderNotFoundException(1), OrderException),
        (InsufficientStockException(1, 3, 2), OrderException),
        (InvalidStatusTransitionException("pending", "shipped", 1), OrderException),
        (OrderValidationException([]), OrderException),
        (OrderOwnershipException(1, 2), OrderException),
    ])
    def test_domain_exceptions_share_base(self, exc, parent):
        assert isinstance(exc, parent)
        assert isinstance(exc, MarketplaceException)


class TestMarketplaceException:

    def test_str_and_repr(self):
        exc = MarketplaceException("Something failed", details={'order_id': 3})

        assert str(exc) == "Something failed"
        assert repr(exc) == "MarketplaceException('Something failed', order_id=3)"

    def test_details_default_to_empty(self):
        exc = MarketplaceException("Something failed")

        assert exc.details == {}
        assert repr(exc) == "MarketplaceException('Something failed')"


class TestOrderExceptions:

    def test_insufficient_stock_with_available(self):
        exc = InsufficientStockException(product_id=4, requested=3, available=2)

        assert exc.product_id == 4
        assert exc.requested == 3
        assert exc.available == 2
        assert "requested 3, available 2" in str(exc)

    def test_insufficient_stock_without_available(self):
        exc = InsufficientStockException(product_id=4, requested=3)
        assert str(exc) == "Insufficient stock for product 4: requested 3"

    def test_invalid_transition(self):
        exc = InvalidStatusTransitionException("delivered", "shipped", order_id=8)

        assert "Order 8 cannot move from 'delivered' to 'shipped'" in str(exc)
        assert exc.details == {'order_id': 8, 'current_status': 'delivered', 'requested_status': 'shipped'}

    def test_unknown_status(self):
        exc = InvalidStatusTransitionException(None, "refunded")
        assert str(exc) == "Unknown order status 'refunded'"

    def test_validation_collects_product_ids(self):
        errors = [ProductUnavailableException(1, "Rice"), InsufficientStockException(2, 5, 1)]

        exc = OrderValidationException(errors)

        assert exc.errors == errors
        assert exc.product_ids == [1, 2]
        assert exc.details == {'product_ids': [1, 2]}


class TestProductExceptions:

    def test_unavailable_with_name(self):
        assert str(ProductUnavailableException(5, "Rice")) == "Product 'Rice' (5) is no longer available"

    def test_unavailable_without_name(self):
        assert str(ProductUnavailableException(5)) == "Product 5 is no longer available"

    def test_pricing_configuration_message(self):
        exc = PricingConfigurationException("tier 2 overlaps tier 1", product_id=9)

        assert str(exc) == "Invalid price tiers for product 9: tier 2 overlaps tier 1"
        assert exc.reason == "tier 2 overlaps tier 1"
