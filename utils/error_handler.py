"""
Error Handler Utility for the HTTP layer

Provides centralized error handling with:
- Localized error messages
- Automatic exception to (message, HTTP status) mapping
- Logging for debugging

Usage in routes:
    from utils.error_handler import handle_service_error

    try:
        order = await OrderService.get_order(order_id, session)
    except MarketplaceException as e:
        status_code, payload = handle_service_error(e)
        return JSONResponse(status_code=status_code, content=payload)

The FastAPI app registers marketplace_exception_handler() once, so routes
normally just let the exceptions propagate.
"""

import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from enums.message_audience import MessageAudience
from exceptions import (
    MarketplaceException,
    EmptyCartException,
    InvalidQuantityException,
    PricingConfigurationException,
    ProductNotFoundException,
    ProductUnavailableException,
    ProductOwnershipException,
    OrderNotFoundException,
    InsufficientStockException,
    InvalidStatusTransitionException,
    OrderValidationException,
    OrderOwnershipException,
)
from utils.localizator import Localizator

logger = logging.getLogger(__name__)

# Exception type -> (localization key, HTTP status)
ERROR_MAPPING: dict[type[MarketplaceException], tuple[str, int]] = {
    # Cart exceptions
    EmptyCartException: ("error_empty_cart", status.HTTP_400_BAD_REQUEST),
    InvalidQuantityException: ("error_invalid_quantity", status.HTTP_400_BAD_REQUEST),

    # Pricing exceptions
    PricingConfigurationException: ("error_pricing_configuration", status.HTTP_422_UNPROCESSABLE_ENTITY),

    # Product exceptions
    ProductNotFoundException: ("error_product_not_found", status.HTTP_404_NOT_FOUND),
    ProductUnavailableException: ("error_product_unavailable", status.HTTP_409_CONFLICT),
    ProductOwnershipException: ("error_product_forbidden", status.HTTP_403_FORBIDDEN),

    # Order exceptions
    OrderNotFoundException: ("error_order_not_found", status.HTTP_404_NOT_FOUND),
    InsufficientStockException: ("error_insufficient_stock", status.HTTP_409_CONFLICT),
    InvalidStatusTransitionException: ("error_invalid_status_transition", status.HTTP_422_UNPROCESSABLE_ENTITY),
    OrderValidationException: ("error_order_validation", status.HTTP_409_CONFLICT),
    OrderOwnershipException: ("error_order_forbidden", status.HTTP_403_FORBIDDEN),
}

FORMAT_ATTRIBUTES = (
    'order_id', 'product_id', 'name', 'requested', 'available',
    'current_status', 'requested_status', 'reason',
)


def get_error_message(exception: MarketplaceException, lang: Optional[str] = None) -> tuple[str, str]:
    """
    Convert a service exception to its localization key and localized message.

    Returns:
        (localization_key, message)
    """
    localization_key, _ = ERROR_MAPPING.get(type(exception), ("error_unexpected", None))
    if localization_key == "error_unexpected":
        logger.error(f"Unmapped exception type: {type(exception).__name__}")

    exception_data = {attr: getattr(exception, attr) for attr in FORMAT_ATTRIBUTES if hasattr(exception, attr)}
    if isinstance(exception, OrderValidationException):
        exception_data['product_ids'] = ", ".join(str(pid) for pid in exception.product_ids)

    text = Localizator.get_text(MessageAudience.COMMON, localization_key, lang=lang)
    try:
        return localization_key, text.format(**exception_data)
    except KeyError as e:
        # Missing formatting parameter - log and return without formatting
        logger.error(f"Missing format parameter in error message {localization_key}: {e}")
        return localization_key, text


def handle_service_error(exception: MarketplaceException, lang: Optional[str] = None) -> tuple[int, dict]:
    """
    Convert a service exception to an HTTP status and a JSON payload.

    Returns:
        (status_code, {"error": message, "code": key, "details": {...}})
        OrderValidationException payloads also list each failed line in "errors".
    """
    logger.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")

    _, status_code = ERROR_MAPPING.get(type(exception), (None, status.HTTP_400_BAD_REQUEST))
    code, message = get_error_message(exception, lang)
    payload = {"error": message, "code": code, "details": exception.details}

    if isinstance(exception, OrderValidationException):
        payload["errors"] = []
        for error in exception.errors:
            error_code, error_message = get_error_message(error, lang)
            payload["errors"].append({"error": error_message, "code": error_code, "details": error.details})

    return status_code, payload


def handle_unexpected_error(exception: Exception, lang: Optional[str] = None) -> tuple[int, dict]:
    """
    Handle unexpected exceptions (non-MarketplaceException).

    Note:
        Also logs the full exception for debugging
    """
    logger.error(f"Unexpected error: {type(exception).__name__} - {str(exception)}", exc_info=exception)
    message = Localizator.get_text(MessageAudience.COMMON, "error_unexpected", lang=lang)
    return status.HTTP_500_INTERNAL_SERVER_ERROR, {"error": message, "code": "error_unexpected", "details": {}}


def get_request_language(request: Request) -> Optional[str]:
    """First supported language of the Accept-Language header, None for the default."""
    header = request.headers.get("accept-language", "")
    for part in header.split(","):
        language = part.split(";")[0].strip().lower()[:2]
        if language in ("fr", "en"):
            return language
    return None


async def marketplace_exception_handler(request: Request, exc: MarketplaceException) -> JSONResponse:
    status_code, payload = handle_service_error(exc, get_request_language(request))
    return JSONResponse(status_code=status_code, content=payload)


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code, payload = handle_unexpected_error(exc, get_request_language(request))
    return JSONResponse(status_code=status_code, content=payload)
