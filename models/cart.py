# The cart lives only in the customer's session. Nothing is reserved while items sit
# in the cart, so availability is checked again by the stock ledger during checkout.
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from models.product import ProductDTO


class CartItemDTO(BaseModel):
    product: ProductDTO
    quantity: int = Field(gt=0)

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity


class CartDTO(BaseModel):
    items: list[CartItemDTO] = Field(default_factory=list)


class AddItem(BaseModel):
    type: Literal["add_item"] = "add_item"
    product: ProductDTO
    quantity: int


class UpdateQuantity(BaseModel):
    type: Literal["update_quantity"] = "update_quantity"
    product_id: str
    quantity: int


class RemoveItem(BaseModel):
    type: Literal["remove_item"] = "remove_item"
    product_id: str


class Clear(BaseModel):
    type: Literal["clear"] = "clear"


CartCommand = Annotated[Union[AddItem, UpdateQuantity, RemoveItem, Clear], Field(discriminator="type")]
