# storefront/repos/order_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductVariantModel
from storefront.domain.order_state import OrderStatus


def _detail_options():
    # pozycje z wariantem i produktem, zamowienie z danymi klienta
    return (
        joinedload(OrderModel.account),
        selectinload(OrderModel.items)
        .joinedload(OrderItemModel.variant)
        .joinedload(ProductVariantModel.product),
    )


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        #flush zamiast commit, id potrzebne dla pozycji w tej samej transakcji
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        return item

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(*_detail_options())
        ).scalar_one_or_none()

    def get_order_for_update(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def list_orders_by_account(self, account_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.account_id == account_id)
                .options(*_detail_options())
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def list_orders(self) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .options(*_detail_options())
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def find_by_tracking(self, tracking_number: str, carrier: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(
                OrderModel.tracking_number == tracking_number,
                OrderModel.carrier == carrier,
            )
        ).scalar_one_or_none()

    def lock_overdue_shipments(self, shipped_before: datetime) -> List[OrderModel]:
        # skip_locked: zamowienie trzymane przez reczne "deliver" pomijamy, zlapie je nastepny sweep
        return list(
            self.db.execute(
                select(OrderModel)
                .where(
                    OrderModel.status == OrderStatus.SHIPPED.value,
                    OrderModel.shipped_at <= shipped_before,
                )
                .order_by(OrderModel.id)
                .with_for_update(skip_locked=True)
            ).scalars().all()
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
