import logging
from decimal import Decimal

from exceptions import InvalidQuantityException
from models.cart import AddItem, CartCommand, CartDTO, CartItemDTO, Clear, RemoveItem, UpdateQuantity
from models.product import ProductDTO

logger = logging.getLogger(__name__)


class CartService:
    """
    Pure cart transitions and derived totals.

    apply() never mutates its input: it returns a new CartDTO, which keeps every
    state reachable from a sequence of commands easy to test without mocks.
    Invariants of every returned cart:
    - at most one line per product id
    - every line has quantity > 0
    """

    @staticmethod
    def apply(cart: CartDTO, command: CartCommand) -> CartDTO:
        if isinstance(command, AddItem):
            return CartService._add_item(cart, command)
        if isinstance(command, UpdateQuantity):
            return CartService._update_quantity(cart, command)
        if isinstance(command, RemoveItem):
            return CartDTO(items=[item for item in cart.items if item.product.id != command.product_id])
        if isinstance(command, Clear):
            return CartDTO()
        raise TypeError(f"Unknown cart command: {command!r}")

    @staticmethod
    def is_positive_quantity(quantity) -> bool:
        # bool is an int subclass, reject it explicitly
        return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity > 0

    @staticmethod
    def _add_item(cart: CartDTO, command: AddItem) -> CartDTO:
        if not CartService.is_positive_quantity(command.quantity):
            raise InvalidQuantityException(command.product.id, command.quantity)

        items = []
        merged = False
        for item in cart.items:
            if item.product.id == command.product.id:
                # No upper bound here, stock is validated at checkout
                items.append(CartItemDTO(product=item.product, quantity=item.quantity + command.quantity))
                merged = True
            else:
                items.append(item)
        if not merged:
            items.append(CartItemDTO(product=command.product, quantity=command.quantity))
        return CartDTO(items=items)

    @staticmethod
    def _update_quantity(cart: CartDTO, command: UpdateQuantity) -> CartDTO:
        items = []
        for item in cart.items:
            if item.product.id != command.product_id:
                items.append(item)
            elif command.quantity > 0:
                items.append(CartItemDTO(product=item.product, quantity=command.quantity))
            # quantity <= 0 drops the line
        return CartDTO(items=items)

    @staticmethod
    def total_price(cart: CartDTO) -> Decimal:
        return sum((item.subtotal for item in cart.items), Decimal("0"))

    @staticmethod
    def total_item_count(cart: CartDTO) -> int:
        return sum(item.quantity for item in cart.items)


class Cart:
    """
    The customer's in-progress cart for one session.

    Holds the current CartDTO and replaces it on every command. Totals are
    always recomputed from the lines.
    """

    def __init__(self, state: CartDTO | None = None):
        self._state = state or CartDTO()

    @property
    def state(self) -> CartDTO:
        return self._state

    @property
    def items(self) -> list[CartItemDTO]:
        return list(self._state.items)

    def is_empty(self) -> bool:
        return not self._state.items

    def dispatch(self, command: CartCommand) -> CartDTO:
        self._state = CartService.apply(self._state, command)
        return self._state

    def add_item(self, product: ProductDTO, quantity: int = 1) -> CartDTO:
        if not CartService.is_positive_quantity(quantity):
            raise InvalidQuantityException(product.id, quantity)
        return self.dispatch(AddItem(product=product, quantity=quantity))

    def update_quantity(self, product_id: str, quantity: int) -> CartDTO:
        # Zero and negatives are valid here and drop the line
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise InvalidQuantityException(product_id, quantity)
        return self.dispatch(UpdateQuantity(product_id=product_id, quantity=quantity))

    def remove_item(self, product_id: str) -> CartDTO:
        return self.dispatch(RemoveItem(product_id=product_id))

    def clear(self) -> CartDTO:
        logger.debug(f"Cart cleared ({len(self._state.items)} lines)")
        return self.dispatch(Clear())

    def snapshot(self) -> CartDTO:
        """Deep copy of the current state, unaffected by later commands."""
        return self._state.model_copy(deep=True)

    def total_price(self) -> Decimal:
        return CartService.total_price(self._state)

    def total_item_count(self) -> int:
        return CartService.total_item_count(self._state)
