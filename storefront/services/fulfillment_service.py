# storefront/services/fulfillment_service.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Set

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import Conflict, Forbidden, Internal, InvalidRequest, NotFound
from storefront.domain.order_state import (
    TRANSITIONS,
    Action,
    Capability,
    OrderStatus,
    is_valid_transition,
)
from storefront.domain.principal import Principal
from storefront.repos.order_repo import OrderRepo
from storefront.repos.variant_repo import VariantRepo
from storefront.services.activity_logger import ActivityLogger
from storefront.utils.settings import AUTO_DELIVER_AFTER_DAYS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _required(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"{key} is required")
    return value.strip()


class FulfillmentService:
    """
    Maszyna stanow zamowienia.

    Kazde przejscie to jedna transakcja: locking read zamowienia, sprawdzenie
    uprawnien, sprawdzenie stanu zrodlowego, zapis. Ponowne wywolanie przejscia
    ktore juz sie wydarzylo konczy sie Conflict, bez nadpisywania znacznikow czasu.
    """

    def __init__(
        self,
        db: Session,
        activity_logger: ActivityLogger | None = None,
        auto_deliver_after: timedelta = timedelta(days=AUTO_DELIVER_AFTER_DAYS),
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.variants = VariantRepo(db)
        self.activity_logger = activity_logger or ActivityLogger()
        self.auto_deliver_after = auto_deliver_after

    def transition_order(
        self,
        order_id: int,
        action: Action | str,
        principal: Principal,
        payload: Dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> OrderStatus:
        try:
            action = Action(action)
        except ValueError:
            raise InvalidRequest(f"Unknown action: {action}") from None

        payload = payload or {}
        # walidacja payloadu przed jakimkolwiek dostepem do bazy
        if action is Action.SHIP:
            payload = {
                "tracking_number": _required(payload, "tracking_number"),
                "carrier": _required(payload, "carrier"),
            }
        elif action is Action.CANCEL:
            payload = {"cancel_reason": _required(payload, "cancel_reason")}

        now = now or _utcnow()

        try:
            order = self.repo.get_order_for_update(order_id)
            if not order:
                raise NotFound("Order not found")

            self._authorize(order, action, principal)

            if not is_valid_transition(order.status, action):
                raise Conflict(self._conflict_message(order, action))

            handler = getattr(self, f"_{action.value}")
            handler(order, principal, payload, now)
            order.status = TRANSITIONS[action].target.value

            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            logger.warning(f"Transition {action.value} on order {order_id} hit a constraint: {e}")
            raise Conflict("Tracking number and carrier are already assigned to another order") from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Transition {action.value} on order {order_id} failed: {e}")
            raise Internal("Error updating order status") from e
        except Exception:
            self.repo.rollback()
            raise

        status = OrderStatus(order.status)
        logger.info(
            "Order status changed",
            order_id=order_id,
            action=action.value,
            status=status.value,
            account_id=principal.account_id,
        )
        self.activity_logger.log(principal, f"{action.value}_order", f"order {order_id} {status.value}")
        return status

    @staticmethod
    def _capabilities(order: OrderModel, principal: Principal) -> Set[Capability]:
        caps = set()
        if principal.is_staff:
            caps.add(Capability.STAFF)
        if principal.owns(order.account_id):
            caps.add(Capability.OWNER)
        return caps

    def _authorize(self, order: OrderModel, action: Action, principal: Principal) -> None:
        if not self._capabilities(order, principal) & TRANSITIONS[action].allowed:
            raise Forbidden(f"Not allowed to {action.value} this order")

    @staticmethod
    def _conflict_message(order: OrderModel, action: Action) -> str:
        status = OrderStatus(order.status)
        if action is Action.CANCEL:
            return f"Order cannot be cancelled in status {status.value}"
        if status is TRANSITIONS[action].target or (
            action is Action.SHIP and status is OrderStatus.DELIVERED
        ):
            return f"Order is already {status.value.lower()}"
        return f"Cannot {action.value} order in status {status.value}"

    def _prepare(self, order: OrderModel, principal: Principal, payload: Dict[str, Any], now: datetime):
        order.prepared_at = now
        order.prepared_by = principal.account_id

    def _ship(self, order: OrderModel, principal: Principal, payload: Dict[str, Any], now: datetime):
        tracking_number, carrier = payload["tracking_number"], payload["carrier"]

        existing = self.repo.find_by_tracking(tracking_number, carrier)
        if existing is not None and existing.id != order.id:
            raise Conflict(
                f"Tracking number {tracking_number} ({carrier}) is already assigned to another order"
            )

        order.tracking_number = tracking_number
        order.carrier = carrier
        order.shipped_at = now
        order.shipped_by = principal.account_id
        #unique constraint sprawdzany tutaj, w obrebie try
        self.db.flush()

    def _deliver(self, order: OrderModel, principal: Principal, payload: Dict[str, Any], now: datetime):
        order.delivered_at = now

    def _cancel(self, order: OrderModel, principal: Principal, payload: Dict[str, Any], now: datetime):
        order.cancel_reason = payload["cancel_reason"]
        order.cancelled_at = now
        order.cancelled_by = principal.account_id

        # soft cancel: wiersze zostaja, towar wraca na stan
        variants = self.variants.lock_variants([item.variant_id for item in order.items])
        for item in order.items:
            variant = variants.get(item.variant_id)
            if variant is not None:
                variant.quantity += item.quantity

    def sweep_overdue_shipments(self, now: datetime | None = None) -> int:
        """
        Shipped -> Delivered dla zamowien wyslanych co najmniej auto_deliver_after temu.
        Idempotentne: drugie uruchomienie nic nie znajdzie.
        """
        now = now or _utcnow()
        threshold = now - self.auto_deliver_after

        try:
            orders = self.repo.lock_overdue_shipments(threshold)
            for order in orders:
                order.status = OrderStatus.DELIVERED.value
                order.delivered_at = now
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Auto-deliver sweep failed: {e}")
            raise Internal("Error auto-delivering shipped orders") from e

        for order in orders:
            logger.info("Order auto-delivered", order_id=order.id, shipped_at=str(order.shipped_at))

        if orders:
            self.activity_logger.log(None, "auto_deliver_orders", f"{len(orders)} order(s) delivered")
        return len(orders)
