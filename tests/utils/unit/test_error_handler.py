"""
Unit tests for utils.error_handler

Tests cover:
- Exception type -> HTTP status mapping
- Localized, formatted messages (fr/en)
- Per-line errors for OrderValidationException
- Accept-Language parsing
"""

from unittest.mock import MagicMock

import pytest

from exceptions import (
    EmptyCartException,
    InsufficientStockException,
    InvalidStatusTransitionException,
    MarketplaceException,
    OrderNotFoundException,
    OrderOwnershipException,
    OrderValidationException,
    PricingConfigurationException,
    ProductUnavailableException,
)
from utils.error_handler import (
    ERROR_MAPPING,
    get_error_message,
    get_request_language,
    handle_service_error,
    handle_unexpected_error,
)
from utils.localizator import Localizator
from enums.message_audience import MessageAudience


class TestStatusMapping:

    @pytest.mark.parametrize("exc,expected_status", [
        (EmptyCartException(1), 400),
        (PricingConfigurationException("empty"), 422),
        (OrderNotFoundException(1), 404),
        (ProductUnavailableException(1), 409),
        (InsufficientStockException(1, 3, 2), 409),
        (InvalidStatusTransitionException("delivered", "shipped", 1), 422),
        (OrderOwnershipException(1, 2), 403),
    ])
    def test_status_codes(self, exc, expected_status):
        status_code, _ = handle_service_error(exc, "en")
        assert status_code == expected_status

    def test_every_mapped_key_is_localized(self):
        for key, _ in ERROR_MAPPING.values():
            assert Localizator.get_text(MessageAudience.COMMON, key, lang="en")
            assert Localizator.get_text(MessageAudience.COMMON, key, lang="fr")

    def test_unmapped_exception_falls_back(self):
        status_code, payload = handle_service_error(MarketplaceException("odd"), "en")

        assert status_code == 400
        assert payload["code"] == "error_unexpected"


class TestMessages:

    def test_message_formatted_from_exception_attributes(self):
        key, message = get_error_message(InsufficientStockException(4, 3, 2), "en")

        assert key == "error_insufficient_stock"
        assert message == "Insufficient stock for product 4: 3 requested"

    def test_french_message(self):
        _, message = get_error_message(OrderNotFoundException(12), "fr")
        assert message == "Commande #12 introuvable"

    def test_payload_carries_details(self):
        _, payload = handle_service_error(InvalidStatusTransitionException("delivered", "shipped", 3), "en")

        assert payload["error"] == "Cannot change status to 'shipped'"
        assert payload["details"]["current_status"] == "delivered"

    def test_validation_payload_lists_each_line(self):
        exc = OrderValidationException([ProductUnavailableException(1, "Rice"), InsufficientStockException(2, 5, 1)])

        status_code, payload = handle_service_error(exc, "en")

        assert status_code == 409
        assert payload["error"] == "Some items in your cart are no longer available: products 1, 2"
        assert [e["code"] for e in payload["errors"]] == ["error_product_unavailable", "error_insufficient_stock"]
        assert payload["errors"][1]["details"]["available"] == 1

    def test_unexpected_error(self):
        status_code, payload = handle_unexpected_error(RuntimeError("boom"), "en")

        assert status_code == 500
        assert payload["error"] == "An unexpected error occurred"
        assert "boom" not in payload["error"]


class TestRequestLanguage:

    @pytest.mark.parametrize("header,expected", [
        ("fr-FR,fr;q=0.9,en;q=0.8", "fr"),
        ("en-US", "en"),
        ("de-DE,en;q=0.5", "en"),
        ("de-DE", None),
        ("", None),
    ])
    def test_accept_language(self, header, expected):
        request = MagicMock()
        request.headers = {"accept-language": header} if header else {}

        assert get_request_language(request) == expected
