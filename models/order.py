from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Column, Integer, Float, DateTime, String, Text, CheckConstraint, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.order_status import OrderStatus
from models.base import Base
from models.orderItem import OrderItemDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)  # Buyer account (owned by the auth service)
    # values_callable stores the literal lower-case status strings
    status = Column(
        SQLEnum(OrderStatus, values_callable=lambda statuses: [s.value for s in statuses], name="order_status"),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    total_amount = Column(Float, nullable=False)
    shipping_address = Column(Text, nullable=False)
    phone = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
    delivered_at = Column(DateTime, nullable=True)

    # Items snapshot: quantities and prices captured at placement time, never recomputed
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_order_total_amount_not_negative'),
        Index('ix_orders_user_created', 'user_id', 'created_at'),
    )


class OrderDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    status: OrderStatus | None = None
    total_amount: float | None = None
    shipping_address: str | None = None
    phone: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    delivered_at: datetime | None = None
    items: list[OrderItemDTO] = []


class CheckoutDTO(BaseModel):
    """Shipping information entered by the buyer at checkout (cash on delivery)."""
    shipping_address: str = Field(..., max_length=1000)
    phone: str = Field(..., max_length=50)
    notes: str | None = Field(None, max_length=2000)

    @field_validator('shipping_address', 'phone')
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator('notes')
    @classmethod
    def empty_notes_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None
