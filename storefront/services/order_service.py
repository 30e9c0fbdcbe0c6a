# storefront/services/order_service.py
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import Conflict, Forbidden, InsufficientStock, Internal, InvalidRequest, NotFound
from storefront.domain.order_state import OrderStatus
from storefront.domain.principal import Principal
from storefront.domain.snapshot import CartSnapshot
from storefront.repos.account_repo import AccountRepo
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.variant_repo import VariantRepo
from storefront.services.activity_logger import ActivityLogger
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

MAX_NOTE_LENGTH = 500


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Separacja od CartService: koszyk tylko wycenia, tutaj zapis zamowienia.
    """

    def __init__(
        self,
        db: Session,
        notification_service: NotificationService | None = None,
        activity_logger: ActivityLogger | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.variants = VariantRepo(db)
        self.accounts = AccountRepo(db)
        self.notification_service = notification_service or NotificationService()
        self.activity_logger = activity_logger or ActivityLogger()

    def commit_order(self, account_id: int, snapshot: CartSnapshot, note: str | None = None) -> int:
        """
        Use Case: zamowienie z wybranych pozycji koszyka.

        Jedna transakcja:
        1. lock pozycji koszyka i wariantow, ponowne sprawdzenie stanu
        2. insert zamowienia (Pending) i pozycji z cena ze snapshotu
        3. zmniejszenie stanu magazynu
        4. usuniecie tylko wybranych pozycji koszyka
        Po commicie powiadomienie i log aktywnosci (best effort).
        """
        if snapshot.account_id != account_id:
            raise Forbidden("Cart snapshot belongs to a different account")
        if not snapshot.lines:
            raise InvalidRequest("No cart items selected for order")
        if note is not None:
            if not isinstance(note, str):
                raise InvalidRequest("Note must be a string")
            if len(note) > MAX_NOTE_LENGTH:
                raise InvalidRequest(f"Note must be at most {MAX_NOTE_LENGTH} characters")
            note = note.strip() or None

        cart_item_ids = [line.cart_item_id for line in snapshot.lines]

        try:
            locked_items = self.carts.lock_selected_items(account_id, cart_item_ids)
            if len(locked_items) != len(cart_item_ids):
                # np. drugie wyslanie tego samego koszyka
                raise NotFound("Some selected cart items no longer exist")

            # pozycja zmieniona po wycenie: snapshot nieaktualny, nic nie kasujemy
            locked = {item.id: item for item in locked_items}
            for line in snapshot.lines:
                item = locked[line.cart_item_id]
                if item.variant_id != line.variant_id or item.quantity != line.requested_quantity:
                    raise Conflict(
                        f"Cart item {line.cart_item_id} changed since the selection was priced, "
                        "resolve the selection again"
                    )

            variants = self.variants.lock_variants([line.variant_id for line in snapshot.lines])

            # suma ilosci per wariant
            requested: Dict[int, int] = {}
            for line in snapshot.lines:
                requested[line.variant_id] = requested.get(line.variant_id, 0) + line.requested_quantity

            for variant_id, quantity in requested.items():
                variant = variants.get(variant_id)
                if variant is None:
                    raise NotFound(f"Product variant {variant_id} not found")
                if quantity > variant.quantity:
                    raise InsufficientStock(variant_id, quantity, variant.quantity)

            order = self.repo.create_order(
                OrderModel(
                    account_id=account_id,
                    status=OrderStatus.PENDING.value,
                    total_amount=snapshot.total_amount,
                    delivery_fee=snapshot.delivery_fee,
                    note=note,
                )
            )

            for line in snapshot.lines:
                self.repo.add_order_item(
                    OrderItemModel(
                        order_id=order.id,
                        variant_id=line.variant_id,
                        quantity=line.requested_quantity,
                        price_at_purchase=line.unit_price,
                    )
                )

            for variant_id, quantity in requested.items():
                variants[variant_id].quantity -= quantity

            self.carts.delete_cart_items(cart_item_ids)

            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Order commit failed for account {account_id}: {e}")
            raise Internal("Error placing order") from e
        except Exception:
            self.repo.rollback()
            raise

        order_id = order.id
        logger.info(
            "Order created",
            order_id=order_id,
            account_id=account_id,
            units=snapshot.total_quantity,
            total_amount=str(snapshot.total_amount),
        )

        try:
            self._after_commit(account_id, order_id, snapshot, note)
        except Exception as e:
            logger.error(f"Post-commit hooks failed for order {order_id}: {e}")
        return order_id

    def _after_commit(self, account_id: int, order_id: int, snapshot: CartSnapshot, note: str | None):
        account = self.accounts.get_account(account_id)
        if account is None:
            logger.warning(f"Account {account_id} not found, skipping confirmation for order {order_id}")
        else:
            summary = snapshot.as_summary(note)
            summary["order_id"] = order_id
            self.notification_service.send_order_confirmation(account.email, summary, account.username)

        role = account.role if account is not None else "customer"
        self.activity_logger.log(
            Principal(account_id=account_id, role=role),
            "place_order",
            f"order {order_id} placed",
        )

    def get_order(self, principal: Principal, order_id: int) -> OrderModel:
        """
        Use Case: Pobranie zamowienia (Query), wlasciciel albo staff.
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFound("Order not found")

        if not (principal.is_staff or principal.owns(order.account_id)):
            raise Forbidden("Access to this order is not allowed")

        return order

    def list_orders(self, account_id: int) -> List[OrderModel]:
        return self.repo.list_orders_by_account(account_id)

    def list_all_orders(self) -> List[OrderModel]:
        return self.repo.list_orders()

    @staticmethod
    def to_created(order_id: int, snapshot: CartSnapshot) -> Dict[str, Any]:
        return {
            "order_id": order_id,
            "status": OrderStatus.PENDING.value,
            "total_amount": snapshot.total_amount,
            "delivery_fee": snapshot.delivery_fee,
        }
