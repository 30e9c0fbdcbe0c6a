# storefront/repos/cart_repo.py
from typing import List, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel, ProductVariantModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_account(self, account_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.account_id == account_id)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_item(self, cart_id: int, variant_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.variant_id == variant_id,
            )
        ).scalar_one_or_none()

    def get_account_cart_item(self, account_id: int, cart_item_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel)
            .join(CartModel, CartItemModel.cart_id == CartModel.id)
            .where(
                CartItemModel.id == cart_item_id,
                CartModel.account_id == account_id,
            )
        ).scalar_one_or_none()

    def get_cart_lines(self, cart_id: int) -> List[tuple]:
        """Pozycje koszyka razem z wariantem i produktem."""
        rows = self.db.execute(
            select(CartItemModel, ProductVariantModel, ProductModel)
            .join(ProductVariantModel, CartItemModel.variant_id == ProductVariantModel.id)
            .join(ProductModel, ProductVariantModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.id)
        ).all()
        return [tuple(r) for r in rows]

    def get_selected_lines(self, account_id: int, cart_item_ids: Sequence[int]) -> List[tuple]:
        """
        Wybrane pozycje, tylko z koszyka danego konta.
        Obce lub nieistniejace id po prostu nie wracaja.
        """
        rows = self.db.execute(
            select(CartItemModel, ProductVariantModel, ProductModel)
            .join(CartModel, CartItemModel.cart_id == CartModel.id)
            .join(ProductVariantModel, CartItemModel.variant_id == ProductVariantModel.id)
            .join(ProductModel, ProductVariantModel.product_id == ProductModel.id)
            .where(
                CartItemModel.id.in_(list(cart_item_ids)),
                CartModel.account_id == account_id,
            )
            .order_by(CartItemModel.id)
        ).all()
        return [tuple(r) for r in rows]

    def lock_selected_items(self, account_id: int, cart_item_ids: Sequence[int]) -> List[CartItemModel]:
        # SELECT ... FOR UPDATE, druga transakcja na tych samych pozycjach czeka
        return list(
            self.db.execute(
                select(CartItemModel)
                .join(CartModel, CartItemModel.cart_id == CartModel.id)
                .where(
                    CartItemModel.id.in_(list(cart_item_ids)),
                    CartModel.account_id == account_id,
                )
                .order_by(CartItemModel.id)
                .with_for_update(of=CartItemModel)
                .execution_options(populate_existing=True)
            ).scalars().all()
        )

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def delete_cart_items(self, cart_item_ids: Sequence[int]) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.id.in_(list(cart_item_ids)))
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
