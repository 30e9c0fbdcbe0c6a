from decimal import Decimal
from typing import Dict, Any, Iterable
from sqlalchemy.orm import Session
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import InsufficientStock, InvalidRequest, NotFound
from storefront.domain.snapshot import CartSnapshot, ResolvedLine, compute_delivery_fee
from storefront.repos.cart_repo import CartRepo
from storefront.repos.variant_repo import VariantRepo
from storefront.utils.settings import DELIVERY_BASE_FEE, DELIVERY_EXTRA_UNIT_FEE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _normalize_ids(cart_item_ids: Iterable[int] | None) -> tuple:
    if not cart_item_ids:
        raise InvalidRequest("No cart items selected for order")

    ids = []
    for raw in cart_item_ids:
        if isinstance(raw, bool) or not isinstance(raw, int) or raw <= 0:
            raise InvalidRequest(f"Invalid cart item id: {raw!r}")
        if raw not in ids:
            ids.append(raw)
    return tuple(ids)


class CartService:
    """
    Use case'y koszyka
    commands (add, remove) modyfikuja stan
    query (get, resolve_selection) tylko odczyt
    """

    def __init__(
        self,
        db: Session,
        base_fee: Decimal = DELIVERY_BASE_FEE,
        extra_unit_fee: Decimal = DELIVERY_EXTRA_UNIT_FEE,
    ):
        self.repo = CartRepo(db)
        self.variants = VariantRepo(db)
        self.base_fee = base_fee
        self.extra_unit_fee = extra_unit_fee

    #query - odczyt
    def get_cart(self, account_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_account(account_id)

        if not cart:
            return {"cart_id": None, "account_id": account_id, "items": []}

        lines = self.repo.get_cart_lines(cart.id)

        return {
            "cart_id": cart.id,
            "account_id": account_id,
            "items": [
                {
                    "cart_item_id": item.id,
                    "variant_id": variant.id,
                    "product_name": product.name,
                    "gender": variant.gender,
                    "size": variant.size,
                    "quantity": item.quantity,
                    "available_quantity": variant.quantity,
                    "price": product.price,
                }
                for item, variant, product in lines
            ],
        }

    def resolve_selection(self, account_id: int, cart_item_ids: Iterable[int]) -> CartSnapshot:
        """
        Wycena wybranych pozycji koszyka.

        - pusty wybor -> InvalidRequest (bez dotykania bazy)
        - brakujaca lub obca pozycja -> NotFound dla calego zadania
        - ilosc > stan -> InsufficientStock z id wariantu

        Sprawdzenie stanu jest tylko doradcze, commit_order czyta stan ponownie pod lockiem.
        """
        ids = _normalize_ids(cart_item_ids)

        rows = self.repo.get_selected_lines(account_id, ids)
        found = {item.id for item, _, _ in rows}
        missing = [i for i in ids if i not in found]
        if missing:
            logger.info(f"Account {account_id} selected unknown cart items {missing}")
            raise NotFound(
                f"Cart items not found or do not belong to this account: {missing}"
            )

        lines = []
        for item, variant, product in rows:
            if item.quantity > variant.quantity:
                raise InsufficientStock(variant.id, item.quantity, variant.quantity)

            lines.append(
                ResolvedLine(
                    cart_item_id=item.id,
                    variant_id=variant.id,
                    requested_quantity=item.quantity,
                    available_quantity=variant.quantity,
                    unit_price=Decimal(product.price),
                    product_name=product.name,
                    size=variant.size,
                )
            )

        total_quantity = sum(line.requested_quantity for line in lines)
        subtotal = sum((line.line_total for line in lines), Decimal("0.00"))
        delivery_fee = compute_delivery_fee(total_quantity, self.base_fee, self.extra_unit_fee)

        return CartSnapshot(
            account_id=account_id,
            lines=tuple(lines),
            total_quantity=total_quantity,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            # oplata za dostawe wchodzi do total_amount zamowienia
            total_amount=subtotal + delivery_fee,
            cart_item_ids=ids,
        )

    #commands
    def add_item(self, account_id: int, variant_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidRequest("Quantity must be greater than 0")

        variant = self.variants.get_variant(variant_id)
        if not variant:
            raise NotFound(f"Product variant {variant_id} not found")

        if quantity > variant.quantity:
            raise InsufficientStock(variant.id, quantity, variant.quantity)

        try:
            cart = self.repo.get_cart_by_account(account_id)
            if not cart:
                cart = self.repo.create_cart(CartModel(account_id=account_id))
                logger.info(f"Created cart {cart.id} for account {account_id}")

            existing = self.repo.get_cart_item(cart.id, variant_id)
            if existing:
                new_quantity = existing.quantity + quantity
                if new_quantity > variant.quantity:
                    raise InsufficientStock(variant.id, new_quantity, variant.quantity)

                logger.info(
                    f"Variant {variant_id} already in cart {cart.id}, "
                    f"quantity {existing.quantity} -> {new_quantity}"
                )
                existing.quantity = new_quantity
                self.repo.add_cart_item(existing)
            else:
                self.repo.add_cart_item(
                    CartItemModel(cart_id=cart.id, variant_id=variant_id, quantity=quantity)
                )

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        return self.get_cart(account_id)

    def remove_item(self, account_id: int, cart_item_id: int) -> Dict[str, Any]:
        item = self.repo.get_account_cart_item(account_id, cart_item_id)

        if not item:
            raise NotFound("Cart item not found or does not belong to this account")

        self.repo.delete_cart_item(item)
        self.repo.commit()

        logger.info(f"Removed cart item {cart_item_id} for account {account_id}")

        return self.get_cart(account_id)
