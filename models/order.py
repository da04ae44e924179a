from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Column, String, Numeric, DateTime, CheckConstraint, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship

from enums.error_code import StorefrontErrorCode
from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from models.base import Base
from models.orderItem import OrderItemDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(String(36), primary_key=True)
    order_number = Column(String(32), nullable=False, unique=True)  # e.g. ORD-20250108-000001
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(64), nullable=False)
    customer_address = Column(String, nullable=False)
    # Always the sum of the line subtotals, computed by OrderRepository.create
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(SQLEnum(OrderStatus, values_callable=lambda e: [m.value for m in e]),
                    nullable=False, default=OrderStatus.PENDING)
    payment_method = Column(SQLEnum(PaymentMethod, values_callable=lambda e: [m.value for m in e]),
                            nullable=False, default=PaymentMethod.COD)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    # Lines keep the order they had in the cart
    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan',
                         order_by='OrderItem.line_number', lazy='selectin')

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_order_total_amount_non_negative'),
        Index('ix_orders_created_at', 'created_at'),
    )


class CustomerInfoDTO(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = ""

    def missing_fields(self) -> list[str]:
        """Names of required fields that are empty or whitespace only."""
        return [field for field in ("name", "phone", "address") if not getattr(self, field).strip()]


class OrderDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_number: str
    customer_name: str
    customer_phone: str
    customer_address: str
    total_amount: Decimal
    status: OrderStatus
    payment_method: PaymentMethod = PaymentMethod.COD
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemDTO] = Field(default_factory=list)


class CreateOrderLineDTO(BaseModel):
    product_id: str
    quantity: int


class CreateOrderRequestDTO(BaseModel):
    customer_name: str
    customer_phone: str
    customer_address: str
    # Only product id + quantity: the store snapshots name and price itself
    items: list[CreateOrderLineDTO]


class CreateOrderResultDTO(BaseModel):
    success: bool
    order_id: str | None = None
    order_number: str | None = None
    total_amount: Decimal | None = None
    error: str | None = None
    code: StorefrontErrorCode | None = None


class OrderListResultDTO(BaseModel):
    success: bool
    orders: list[OrderDTO] | None = None
    error: str | None = None
    code: StorefrontErrorCode | None = None


class UpdateOrderStatusResultDTO(BaseModel):
    success: bool
    order_id: str | None = None
    order_number: str | None = None
    status: OrderStatus | None = None
    updated_at: datetime | None = None
    error: str | None = None
    code: StorefrontErrorCode | None = None


class StatusUpdateOutcomeDTO(BaseModel):
    """Per-action result handed back to the UI by the order lifecycle manager."""
    success: bool
    error: str | None = None
