# Product is the catalog entry a customer adds to the cart. The stock column is the
# authoritative quantity used by the stock ledger at checkout; the copy carried in
# ProductDTO is only a display hint and may be stale by the time the cart is checked out.
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Column, String, Integer, Numeric, DateTime, CheckConstraint, func

from models.base import Base


class Product(Base):
    __tablename__ = 'products'

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(String, nullable=False, default="")
    image = Column(String, nullable=False, default="")
    category = Column(String(64), nullable=False, default="")
    stock = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
        CheckConstraint('stock >= 0', name='check_product_stock_non_negative'),
    )


class ProductDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: Decimal = Field(ge=0)
    image: str = ""
    description: str = ""
    category: str = ""
    stock: int = 0  # Hint only, the ledger decides at checkout
    created_at: datetime | None = None
    updated_at: datetime | None = None
