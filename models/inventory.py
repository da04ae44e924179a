from pydantic import BaseModel, Field

from enums.error_code import StorefrontErrorCode


class InventoryDeductionRequestDTO(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)


class UnavailableItemDTO(BaseModel):
    product_id: str
    current_stock: int | None = None     # Unknown when the product does not exist
    requested_quantity: int | None = None
    reason: str
    code: StorefrontErrorCode


class InventoryAvailabilityDTO(BaseModel):
    available: bool
    message: str | None = None
    unavailable_items: list[UnavailableItemDTO] = Field(default_factory=list)
    # Set when the check itself could not be performed
    error: str | None = None
    code: StorefrontErrorCode | None = None


class DeductionItemResultDTO(BaseModel):
    product_id: str
    product_name: str | None = None
    previous_stock: int
    new_stock: int
    quantity_deducted: int


class BatchDeductionResultDTO(BaseModel):
    success: bool
    message: str | None = None
    results: list[DeductionItemResultDTO] = Field(default_factory=list)
    # On failure: lines handled before the failure was detected
    processed_items: list[DeductionItemResultDTO] = Field(default_factory=list)
    error: str | None = None
    code: StorefrontErrorCode | None = None
