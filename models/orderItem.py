from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship

from models.base import Base


class OrderItem(Base):
    __tablename__ = 'order_items'

    __table_args__ = (
        # Check constraints for data integrity
        CheckConstraint('quantity > 0', name='ck_order_item_positive_quantity'),
        CheckConstraint('product_price >= 0', name='ck_order_item_non_negative_price'),

        Index('ix_order_items_order_id', 'order_id'),
        # One line per product per order
        Index('ix_order_items_unique', 'order_id', 'product_id', unique=True),
    )

    id = Column(String(36), primary_key=True)
    order_id = Column(String(36), ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    line_number = Column(Integer, nullable=False)
    # Not a foreign key: the line must survive catalog changes and deletions
    product_id = Column(String(36), nullable=False)
    # Snapshot taken at order time, never updated afterwards
    product_name = Column(String(255), nullable=False)
    product_price = Column(Numeric(10, 2), nullable=False)
    product_image = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")


class OrderItemDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    product_name: str
    product_price: Decimal
    product_image: str | None = None
    quantity: int
    subtotal: Decimal
