"""
API router for the storefront, seller and admin pages.

Authentication is handled upstream: the auth proxy forwards the caller's
identity in the X-User-Id and X-User-Role headers. Domain errors raised by
the services are rendered by the exception handler registered in app.py.

Cart state is client-local; checkout posts the whole cart and the server
re-validates every line against current product data.
"""

import logging
import uuid
from datetime import datetime
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_db_session
from enums.message_audience import MessageAudience
from enums.order_status import OrderStatus
from enums.user_role import UserRole
from models.cart import CartLineDTO, CartSnapshotDTO
from models.order import OrderDTO, CheckoutDTO
from models.price_tier import TierPricingResultDTO
from models.product import ProductDTO, ProductCreateDTO, ProductUpdateDTO
from services.cart import clamp_quantity
from services.order import OrderService
from services.order_management import OrderManagementService
from services.pricing import PricingService
from services.product import ProductService
from utils.error_handler import get_request_language
from utils.localizator import Localizator
from utils.order_filters import get_filter_type_for_name
from utils.order_state_machine import get_next_valid_statuses

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api", tags=["api"])


def generate_correlation_id() -> str:
    """Generate unique correlation ID for request tracing."""
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


class CurrentUser(BaseModel):
    id: int
    role: UserRole


class QuoteRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class QuoteResponse(BaseModel):
    pricing: TierPricingResultDTO
    tier_label: str
    breakdown: str
    price_list: str | None = None
    message: str | None = None


class PlaceOrderRequest(CheckoutDTO):
    """Checkout payload: the buyer's cart lines plus shipping information."""
    lines: list[CartLineDTO] = []


class OrderStatusUpdateRequest(BaseModel):
    # Plain string: unknown values must reach the lifecycle and be rejected there
    status: str


class ProductActivationRequest(BaseModel):
    is_active: bool


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with get_db_session() as session:
        yield session


async def get_current_user(
    request: Request,
    x_user_id: int | None = Header(None),
    x_user_role: str | None = Header(None)
) -> CurrentUser:
    if x_user_id is None or x_user_role is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=Localizator.get_text(MessageAudience.COMMON, "error_authentication_required",
                                        lang=get_request_language(request))
        )
    try:
        role = UserRole(x_user_role.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=Localizator.get_text(MessageAudience.COMMON, "error_authentication_required",
                                        lang=get_request_language(request))
        )
    return CurrentUser(id=x_user_id, role=role)


def require_roles(*roles: UserRole):
    async def dependency(request: Request, user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            logger.warning(f"Access denied for user {user.id} ({user.role.value}) to {request.url.path}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=Localizator.get_text(MessageAudience.COMMON, "error_access_denied",
                                            lang=get_request_language(request))
            )
        return user
    return dependency


# ============================================================================
# Storefront
# ============================================================================

@api_router.get("/products", response_model=list[ProductDTO])
async def list_products(category: str | None = None, search: str | None = None,
                        page: int | None = Query(None, ge=0),
                        session: AsyncSession = Depends(get_session)):
    return await ProductService.list_active(session, category, search, page)


@api_router.get("/products/{product_id}", response_model=ProductDTO)
async def get_product(product_id: int, session: AsyncSession = Depends(get_session)):
    return await ProductService.get_product(product_id, session)


@api_router.post("/products/{product_id}/quote", response_model=QuoteResponse)
async def quote_product(product_id: int, payload: QuoteRequest, request: Request,
                        session: AsyncSession = Depends(get_session)):
    """
    Price a quantity the way the product page calculator does.

    The quantity is clamped to the current stock; the response says so.
    """
    product = await ProductService.get_product(product_id, session)
    quantity = clamp_quantity(payload.quantity, product.stock) if product.stock > 0 else payload.quantity
    pricing = PricingService.calculate(product.price_tiers, quantity)

    message = None
    if quantity != payload.quantity:
        message = Localizator.get_text(MessageAudience.BUYER, "quantity_clamped",
                                       lang=get_request_language(request)).format(quantity=quantity, stock=product.stock)
    return QuoteResponse(
        pricing=pricing,
        tier_label=PricingService.format_tier_label(pricing.tier),
        breakdown=PricingService.format_tier_breakdown(pricing),
        price_list=PricingService.format_available_tiers(product.price_tiers),
        message=message,
    )


# ============================================================================
# Buyer orders
# ============================================================================

@api_router.post("/orders", status_code=status.HTTP_201_CREATED)
async def place_order(payload: PlaceOrderRequest, request: Request,
                      user: CurrentUser = Depends(require_roles(UserRole.BUYER, UserRole.SELLER, UserRole.ADMIN)),
                      session: AsyncSession = Depends(get_session)):
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Checkout by user {user.id}: {len(payload.lines)} lines")

    order = await OrderService.create_order(
        CartSnapshotDTO(lines=payload.lines),
        CheckoutDTO(shipping_address=payload.shipping_address, phone=payload.phone, notes=payload.notes),
        user.id,
        session
    )

    logger.info(f"[{correlation_id}] ✅ Order {order.id} created for user {user.id}")
    return {
        "order": order.model_dump(mode="json"),
        "message": Localizator.get_text(MessageAudience.BUYER, "order_placed",
                                        lang=get_request_language(request)).format(order_id=order.id),
    }


@api_router.get("/orders", response_model=list[OrderDTO])
async def list_my_orders(user: CurrentUser = Depends(get_current_user),
                         session: AsyncSession = Depends(get_session)):
    return await OrderService.list_user_orders(user.id, session)


@api_router.get("/orders/{order_id}", response_model=OrderDTO)
async def get_order(order_id: int, user: CurrentUser = Depends(get_current_user),
                    session: AsyncSession = Depends(get_session)):
    # Buyers only see their own orders
    owner_check = user.id if user.role == UserRole.BUYER else None
    return await OrderService.get_order(order_id, session, user_id=owner_check)


@api_router.put("/orders/{order_id}/status")
async def update_order_status(order_id: int, payload: OrderStatusUpdateRequest, request: Request,
                              user: CurrentUser = Depends(require_roles(UserRole.ADMIN, UserRole.SELLER)),
                              session: AsyncSession = Depends(get_session)):
    order = await OrderManagementService.update_status(
        order_id,
        payload.status,
        session,
        actor_id=user.id,
        seller_id=user.id if user.role == UserRole.SELLER else None
    )
    lang = get_request_language(request)
    status_label = Localizator.get_text(MessageAudience.COMMON, f"status_{order.status.value}", lang=lang)
    return {
        "order": order.model_dump(mode="json"),
        "message": Localizator.get_text(MessageAudience.ADMIN, "order_status_updated", lang=lang).format(
            order_id=order.id, status=status_label
        ),
        "next_statuses": [s.value for s in get_next_valid_statuses(order.status)],
    }


# ============================================================================
# Admin
# ============================================================================

@api_router.get("/admin/orders", response_model=list[OrderDTO])
async def admin_list_orders(filter: str | None = None,
                            user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
                            session: AsyncSession = Depends(get_session)):
    return await OrderManagementService.list_orders(session, get_filter_type_for_name(filter))


@api_router.get("/admin/stats")
async def admin_stats(user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
                      session: AsyncSession = Depends(get_session)):
    stats = await OrderManagementService.get_statistics(session)
    products = await ProductService.list_all(session)
    stats["total_products"] = len(products)
    stats["active_products"] = sum(1 for p in products if p.is_active)
    return stats


@api_router.get("/admin/products", response_model=list[ProductDTO])
async def admin_list_products(user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
                              session: AsyncSession = Depends(get_session)):
    return await ProductService.list_all(session)


@api_router.get("/order-statuses")
async def list_order_statuses(request: Request):
    """The six order statuses with their labels, in lifecycle order."""
    lang = get_request_language(request)
    return [
        {"value": s.value, "label": Localizator.get_text(MessageAudience.COMMON, f"status_{s.value}", lang=lang)}
        for s in OrderStatus
    ]


# ============================================================================
# Seller products
# ============================================================================

@api_router.get("/seller/products", response_model=list[ProductDTO])
async def seller_list_products(user: CurrentUser = Depends(require_roles(UserRole.SELLER)),
                               session: AsyncSession = Depends(get_session)):
    return await ProductService.list_by_seller(user.id, session)


@api_router.post("/seller/products", status_code=status.HTTP_201_CREATED)
async def seller_create_product(payload: ProductCreateDTO, request: Request,
                                user: CurrentUser = Depends(require_roles(UserRole.SELLER)),
                                session: AsyncSession = Depends(get_session)):
    product = await ProductService.create_product(user.id, payload, session)
    return {
        "product": product.model_dump(mode="json"),
        "message": Localizator.get_text(MessageAudience.SELLER, "product_created", lang=get_request_language(request)),
    }


@api_router.put("/seller/products/{product_id}")
@api_router.put("/admin/products/{product_id}")
async def update_product(product_id: int, payload: ProductUpdateDTO, request: Request,
                         user: CurrentUser = Depends(require_roles(UserRole.SELLER, UserRole.ADMIN)),
                         session: AsyncSession = Depends(get_session)):
    product = await ProductService.update_product(product_id, payload, user.id, user.role, session)
    return {
        "product": product.model_dump(mode="json"),
        "message": Localizator.get_text(MessageAudience.SELLER, "product_updated", lang=get_request_language(request)),
    }


@api_router.put("/seller/products/{product_id}/active", response_model=ProductDTO)
async def set_product_active(product_id: int, payload: ProductActivationRequest,
                             user: CurrentUser = Depends(require_roles(UserRole.SELLER, UserRole.ADMIN)),
                             session: AsyncSession = Depends(get_session)):
    return await ProductService.set_active(product_id, payload.is_active, user.id, user.role, session)


@api_router.delete("/seller/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
@api_router.delete("/admin/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int, hard: bool = False,
                         user: CurrentUser = Depends(require_roles(UserRole.SELLER, UserRole.ADMIN)),
                         session: AsyncSession = Depends(get_session)):
    # Only admins may remove a product for good
    await ProductService.delete_product(product_id, user.id, user.role, session,
                                        hard=hard and user.role == UserRole.ADMIN)


@api_router.get("/seller/stats")
async def seller_stats(user: CurrentUser = Depends(require_roles(UserRole.SELLER)),
                       session: AsyncSession = Depends(get_session)):
    return await ProductService.get_seller_stats(user.id, session)
