from datetime import datetime
import logging
import uuid
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from exceptions import InvalidOrderStateException, OrderNotFoundException
from models.order import Order, OrderDTO, CreateOrderRequestDTO
from models.orderItem import OrderItem
from models.product import ProductDTO
from utils.order_number import format_order_number, order_number_day_prefix
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


class OrderRepository:

    @staticmethod
    async def next_order_number(created_at: datetime, session: AsyncSession) -> str:
        """Next number in the daily sequence, e.g. ORD-20250108-000003 for the third order of the day."""
        day_prefix = order_number_day_prefix(created_at)
        stmt = select(func.count()).select_from(Order).where(Order.order_number.like(f"{day_prefix}%"))
        count = (await session_execute(stmt, session)).scalar()
        return format_order_number(created_at, count + 1)

    @staticmethod
    async def create(
        request: CreateOrderRequestDTO,
        products: dict[str, ProductDTO],
        session: AsyncSession
    ) -> Order:
        """
        Persist an order with its lines, snapshotting product name, price and image.

        Prices come from the products mapping loaded by the caller from the catalog,
        never from the request. total_amount is the sum of the line subtotals.

        Args:
            request: Customer fields and (product_id, quantity) lines
            products: Current catalog entries for every product_id in the request
            session: Database session (caller commits)

        Returns:
            The flushed Order row
        """
        now = datetime.now()
        order = Order(
            id=str(uuid.uuid4()),
            order_number=await OrderRepository.next_order_number(now, session),
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            customer_address=request.customer_address,
            status=OrderStatus.PENDING,
            payment_method=PaymentMethod.COD,
            created_at=now,
            updated_at=now,
        )

        total = Decimal("0")
        for line_number, line in enumerate(request.items, start=1):
            product = products[line.product_id]
            subtotal = product.price * line.quantity
            total += subtotal
            order.items.append(OrderItem(
                id=str(uuid.uuid4()),
                line_number=line_number,
                product_id=product.id,
                product_name=product.name,
                product_price=product.price,
                product_image=product.image or None,
                quantity=line.quantity,
                subtotal=subtotal,
            ))
        order.total_amount = total

        session.add(order)
        await session_flush(session)

        logger.info(f"✅ Order {order.order_number} created ({len(order.items)} lines, total {total})")
        return order

    @staticmethod
    async def get_by_id(order_id: str, session: AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_all(session: AsyncSession) -> list[OrderDTO]:
        """All orders, most recent first, each with its lines in cart order."""
        stmt = select(Order).order_by(Order.created_at.desc(), Order.order_number.desc())
        result = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in result.scalars().all()]

    @staticmethod
    async def update_status(order_id: str, status: OrderStatus, session: AsyncSession) -> Order:
        """
        Move an order to its next status.

        Raises:
            OrderNotFoundException: No order with this id
            InvalidOrderStateException: Transition not allowed by OrderStateMachine
        """
        stmt = select(Order).where(Order.id == order_id)
        order = (await session_execute(stmt, session)).scalar()
        if order is None:
            raise OrderNotFoundException(order_id)

        if not OrderStateMachine.validate_and_log_transition(order_id, order.status, status):
            next_status = OrderStateMachine.get_next_status(order.status)
            raise InvalidOrderStateException(
                order_id=order_id,
                current_state=order.status.value,
                required_state=next_status.value if next_status else "none (final status)"
            )

        order.status = status
        order.updated_at = datetime.now()
        await session_flush(session)
        return order
