"""
Unit Tests: CheckoutService.place_order()

The stock ledger and order store are AsyncMock substitutes, so every test can
assert exactly which collaborator calls happened (and which did not).
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from enums.error_code import StorefrontErrorCode
from exceptions import (
    CheckoutException,
    EmptyCartException,
    InventoryCheckFailedException,
    InventoryDeductionException,
    InventoryUnavailableException,
    MissingCustomerInfoException,
    OrderCreationException,
)
from models.inventory import (
    BatchDeductionResultDTO,
    DeductionItemResultDTO,
    InventoryAvailabilityDTO,
    InventoryDeductionRequestDTO,
    UnavailableItemDTO,
)
from models.order import CreateOrderLineDTO, CreateOrderResultDTO, CustomerInfoDTO
from services.cart import Cart
from services.checkout import CheckoutService


@pytest.fixture
def customer():
    return CustomerInfoDTO(name="Jane Doe", phone="+49 30 1234567", address="Main Street 1, Berlin")


@pytest.fixture
def stock_ledger():
    ledger = AsyncMock()
    ledger.check_availability.return_value = InventoryAvailabilityDTO(available=True)
    ledger.deduct_batch.return_value = BatchDeductionResultDTO(
        success=True,
        results=[DeductionItemResultDTO(product_id="p1", previous_stock=10, new_stock=8, quantity_deducted=2)]
    )
    return ledger


@pytest.fixture
def order_store():
    store = AsyncMock()
    store.create.return_value = CreateOrderResultDTO(
        success=True, order_id="o1", order_number="ORD-1", total_amount=Decimal("200")
    )
    return store


@pytest.fixture
def checkout(stock_ledger, order_store):
    return CheckoutService(stock_ledger, order_store)


@pytest.fixture
def cart_one_line(make_product):
    cart = Cart()
    cart.add_item(make_product("p1", price="100", name="Lamp"), 2)
    return cart


@pytest.fixture
def cart_two_lines(make_product):
    cart = Cart()
    cart.add_item(make_product("p1", price="100", name="Lamp"), 2)
    cart.add_item(make_product("p2", price="50", name="Chair"), 2)
    return cart


class TestSuccessfulCheckout:

    @pytest.mark.asyncio
    async def test_single_line_order(self, checkout, cart_one_line, customer, stock_ledger, order_store):
        assert cart_one_line.total_price() == Decimal("200")

        order_id = await checkout.place_order(cart_one_line, customer)

        assert order_id == "o1"
        assert cart_one_line.is_empty()
        expected_requests = [InventoryDeductionRequestDTO(product_id="p1", quantity=2)]
        stock_ledger.check_availability.assert_awaited_once_with(expected_requests)
        stock_ledger.deduct_batch.assert_awaited_once_with(expected_requests)
        order_store.create.assert_awaited_once_with(
            customer_name="Jane Doe",
            customer_phone="+49 30 1234567",
            customer_address="Main Street 1, Berlin",
            items=[CreateOrderLineDTO(product_id="p1", quantity=2)]
        )

    @pytest.mark.asyncio
    async def test_requests_follow_cart_line_order(self, checkout, cart_two_lines, customer, stock_ledger):
        await checkout.place_order(cart_two_lines, customer)

        requests = stock_ledger.check_availability.await_args.args[0]
        assert [(r.product_id, r.quantity) for r in requests] == [("p1", 2), ("p2", 2)]

    @pytest.mark.asyncio
    async def test_order_lines_carry_no_price(self, checkout, cart_one_line, customer, order_store):
        await checkout.place_order(cart_one_line, customer)

        lines = order_store.create.await_args.kwargs["items"]
        assert set(lines[0].model_dump().keys()) == {"product_id", "quantity"}

    @pytest.mark.asyncio
    async def test_missing_order_id_uses_local_fallback(self, checkout, cart_one_line, customer, order_store):
        order_store.create.return_value = CreateOrderResultDTO(success=True, order_number="ORD-1")

        order_id = await checkout.place_order(cart_one_line, customer)

        assert order_id.startswith("ORD-")
        assert len(order_id.split("-")[-1]) == 9
        assert cart_one_line.is_empty()


class TestValidation:

    @pytest.mark.asyncio
    async def test_empty_cart(self, checkout, customer, stock_ledger, order_store):
        with pytest.raises(EmptyCartException):
            await checkout.place_order(Cart(), customer)

        stock_ledger.check_availability.assert_not_awaited()
        stock_ledger.deduct_batch.assert_not_awaited()
        order_store.create.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["name", "phone", "address"])
    async def test_blank_customer_field(self, checkout, cart_one_line, customer, stock_ledger, order_store, field):
        incomplete = customer.model_copy(update={field: "   "})

        with pytest.raises(MissingCustomerInfoException) as exc_info:
            await checkout.place_order(cart_one_line, incomplete)

        assert exc_info.value.missing_fields == [field]
        assert field in str(exc_info.value)
        stock_ledger.check_availability.assert_not_awaited()
        order_store.create.assert_not_awaited()
        assert len(cart_one_line.items) == 1


class TestAvailabilityFailures:

    @pytest.mark.asyncio
    async def test_unavailable_product_is_named(self, checkout, cart_two_lines, customer, stock_ledger, order_store):
        stock_ledger.check_availability.return_value = InventoryAvailabilityDTO(
            available=False,
            unavailable_items=[UnavailableItemDTO(
                product_id="p2", current_stock=1, requested_quantity=2,
                reason="insufficient stock", code=StorefrontErrorCode.INSUFFICIENT_STOCK
            )]
        )
        before = cart_two_lines.snapshot()

        with pytest.raises(InventoryUnavailableException) as exc_info:
            await checkout.place_order(cart_two_lines, customer)

        message = str(exc_info.value)
        assert "p2" in message
        assert "Chair" in message
        assert "insufficient stock" in message
        assert "p1" not in message
        stock_ledger.deduct_batch.assert_not_awaited()
        order_store.create.assert_not_awaited()
        assert cart_two_lines.state == before

    @pytest.mark.asyncio
    async def test_every_unavailable_product_is_listed(self, checkout, cart_two_lines, customer, stock_ledger):
        stock_ledger.check_availability.return_value = InventoryAvailabilityDTO(
            available=False,
            unavailable_items=[
                UnavailableItemDTO(product_id="p1", reason="product not found",
                                   code=StorefrontErrorCode.PRODUCT_NOT_FOUND),
                UnavailableItemDTO(product_id="p2", current_stock=0, requested_quantity=2,
                                   reason="insufficient stock", code=StorefrontErrorCode.INSUFFICIENT_STOCK),
            ]
        )

        with pytest.raises(InventoryUnavailableException) as exc_info:
            await checkout.place_order(cart_two_lines, customer)

        assert "Lamp (p1): product not found" in str(exc_info.value)
        assert "Chair (p2): insufficient stock (requested 2, available 0)" in str(exc_info.value)
        assert [item.product_id for item in exc_info.value.unavailable_items] == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_check_raises(self, checkout, cart_one_line, customer, stock_ledger, order_store):
        stock_ledger.check_availability.side_effect = ConnectionError("network down")

        with pytest.raises(InventoryCheckFailedException) as exc_info:
            await checkout.place_order(cart_one_line, customer)

        assert "network down" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        stock_ledger.deduct_batch.assert_not_awaited()
        order_store.create.assert_not_awaited()
        assert len(cart_one_line.items) == 1

    @pytest.mark.asyncio
    async def test_check_reports_error(self, checkout, cart_one_line, customer, stock_ledger):
        stock_ledger.check_availability.return_value = InventoryAvailabilityDTO(
            available=False, error="database locked", code=StorefrontErrorCode.DATABASE_ERROR
        )

        with pytest.raises(InventoryCheckFailedException) as exc_info:
            await checkout.place_order(cart_one_line, customer)

        assert exc_info.value.code == StorefrontErrorCode.DATABASE_ERROR
        stock_ledger.deduct_batch.assert_not_awaited()


class TestDeductionFailures:

    @pytest.mark.asyncio
    async def test_deduction_refused(self, checkout, cart_two_lines, customer, stock_ledger, order_store):
        stock_ledger.deduct_batch.return_value = BatchDeductionResultDTO(
            success=False, error="Insufficient stock for Chair", code=StorefrontErrorCode.INSUFFICIENT_STOCK,
            processed_items=[DeductionItemResultDTO(product_id="p1", previous_stock=5, new_stock=3,
                                                    quantity_deducted=2)]
        )
        before = cart_two_lines.snapshot()

        with pytest.raises(InventoryDeductionException) as exc_info:
            await checkout.place_order(cart_two_lines, customer)

        assert "Insufficient stock for Chair" in str(exc_info.value)
        assert exc_info.value.code == StorefrontErrorCode.INSUFFICIENT_STOCK
        assert [item.product_id for item in exc_info.value.processed_items] == ["p1"]
        order_store.create.assert_not_awaited()
        assert cart_two_lines.state == before

    @pytest.mark.asyncio
    async def test_deduction_raises(self, checkout, cart_one_line, customer, stock_ledger, order_store):
        stock_ledger.deduct_batch.side_effect = TimeoutError("ledger timeout")
        before = cart_one_line.snapshot()

        with pytest.raises(InventoryDeductionException) as exc_info:
            await checkout.place_order(cart_one_line, customer)

        assert "ledger timeout" in str(exc_info.value)
        order_store.create.assert_not_awaited()
        assert cart_one_line.state == before


class TestOrderCreationFailures:

    @pytest.mark.asyncio
    async def test_store_rejects_after_deduction(self, checkout, cart_one_line, customer, order_store, caplog):
        order_store.create.return_value = CreateOrderResultDTO(
            success=False, error="Products not found: p1", code=StorefrontErrorCode.PRODUCT_NOT_FOUND
        )

        with caplog.at_level("CRITICAL", logger="services.checkout"):
            with pytest.raises(OrderCreationException) as exc_info:
                await checkout.place_order(cart_one_line, customer)

        message = str(exc_info.value)
        assert "Products not found: p1" in message
        assert "not been restored" in message
        assert [item.product_id for item in exc_info.value.deducted_items] == ["p1"]
        assert exc_info.value.code == StorefrontErrorCode.PRODUCT_NOT_FOUND
        assert len(cart_one_line.items) == 1
        assert any(record.levelname == "CRITICAL" for record in caplog.records)

    @pytest.mark.asyncio
    async def test_store_raises_after_deduction(self, checkout, cart_one_line, customer, order_store):
        order_store.create.side_effect = RuntimeError("store unavailable")

        with pytest.raises(OrderCreationException) as exc_info:
            await checkout.place_order(cart_one_line, customer)

        assert "store unavailable" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert len(cart_one_line.items) == 1

    @pytest.mark.asyncio
    async def test_all_failures_share_checkout_base(self, checkout, cart_one_line, customer, order_store):
        order_store.create.return_value = CreateOrderResultDTO(success=False)

        with pytest.raises(CheckoutException):
            await checkout.place_order(cart_one_line, customer)
