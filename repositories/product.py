import logging
from collections import OrderedDict

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute
from enums.error_code import StorefrontErrorCode
from models.inventory import (
    BatchDeductionResultDTO,
    DeductionItemResultDTO,
    InventoryAvailabilityDTO,
    InventoryDeductionRequestDTO,
    UnavailableItemDTO,
)
from models.product import Product, ProductDTO

logger = logging.getLogger(__name__)


class ProductRepository:

    @staticmethod
    async def get_by_ids(product_ids: list[str], session: AsyncSession) -> dict[str, ProductDTO]:
        """
        Batch load products for multiple ids (eliminates N+1 queries).

        Args:
            product_ids: List of product IDs
            session: Database session

        Returns:
            Dict mapping product_id -> ProductDTO (missing ids are simply absent)
        """
        if not product_ids:
            return {}

        stmt = select(Product).where(Product.id.in_(product_ids))
        result = await session_execute(stmt, session)
        products = result.scalars().all()

        return {product.id: ProductDTO.model_validate(product, from_attributes=True) for product in products}

    @staticmethod
    async def get_stock_levels(product_ids: list[str], session: AsyncSession) -> dict[str, int]:
        if not product_ids:
            return {}
        stmt = select(Product.id, Product.stock).where(Product.id.in_(product_ids))
        result = await session_execute(stmt, session)
        return {row[0]: row[1] for row in result.all()}

    @staticmethod
    async def check_availability(
        requests: list[InventoryDeductionRequestDTO],
        session: AsyncSession
    ) -> InventoryAvailabilityDTO:
        """
        Check that every requested product exists and has enough stock.

        Quantities for the same product id are summed before comparing, so a batch
        can never pass the check while asking for more than the total stock.

        Args:
            requests: One request per cart line
            session: Database session

        Returns:
            InventoryAvailabilityDTO with one UnavailableItemDTO per failing product
        """
        requested: OrderedDict[str, int] = OrderedDict()
        for request in requests:
            requested[request.product_id] = requested.get(request.product_id, 0) + request.quantity

        stock_levels = await ProductRepository.get_stock_levels(list(requested.keys()), session)

        unavailable = []
        for product_id, quantity in requested.items():
            if product_id not in stock_levels:
                unavailable.append(UnavailableItemDTO(
                    product_id=product_id,
                    requested_quantity=quantity,
                    reason="product not found",
                    code=StorefrontErrorCode.PRODUCT_NOT_FOUND
                ))
            elif stock_levels[product_id] < quantity:
                unavailable.append(UnavailableItemDTO(
                    product_id=product_id,
                    current_stock=stock_levels[product_id],
                    requested_quantity=quantity,
                    reason="insufficient stock",
                    code=StorefrontErrorCode.INSUFFICIENT_STOCK
                ))

        if unavailable:
            return InventoryAvailabilityDTO(
                available=False,
                message=f"{len(unavailable)} of {len(requested)} products unavailable",
                unavailable_items=unavailable
            )
        return InventoryAvailabilityDTO(available=True, message="All products in stock")

    @staticmethod
    async def deduct_batch(
        requests: list[InventoryDeductionRequestDTO],
        session: AsyncSession
    ) -> BatchDeductionResultDTO:
        """
        Deduct stock for every request inside the caller's transaction.

        Each line is a conditional update (stock = stock - q WHERE stock >= q), so a
        concurrent deduction between the read and the write can never drive stock
        negative. Processing stops at the first failing line; the caller MUST roll back
        the session on failure to undo the lines already applied.

        Returns:
            BatchDeductionResultDTO. On failure processed_items lists the lines applied
            before the failure was detected.
        """
        processed: list[DeductionItemResultDTO] = []

        for request in requests:
            stmt = select(Product.name, Product.stock).where(Product.id == request.product_id).with_for_update()
            row = (await session_execute(stmt, session)).first()

            if row is None:
                return BatchDeductionResultDTO(
                    success=False,
                    error=f"Product {request.product_id} not found",
                    code=StorefrontErrorCode.PRODUCT_NOT_FOUND,
                    processed_items=processed
                )

            name, previous_stock = row
            update_stmt = (update(Product)
                           .where(Product.id == request.product_id, Product.stock >= request.quantity)
                           .values(stock=Product.stock - request.quantity))
            result = await session_execute(update_stmt, session)

            if result.rowcount != 1:
                logger.warning(
                    f"Stock deduction refused for product {request.product_id}: "
                    f"requested {request.quantity}, available {previous_stock}"
                )
                return BatchDeductionResultDTO(
                    success=False,
                    error=f"Insufficient stock for {name}: requested {request.quantity}, available {previous_stock}",
                    code=StorefrontErrorCode.INSUFFICIENT_STOCK,
                    processed_items=processed
                )

            processed.append(DeductionItemResultDTO(
                product_id=request.product_id,
                product_name=name,
                previous_stock=previous_stock,
                new_stock=previous_stock - request.quantity,
                quantity_deducted=request.quantity
            ))

        return BatchDeductionResultDTO(
            success=True,
            message=f"Stock deducted for {len(processed)} products",
            results=processed
        )
