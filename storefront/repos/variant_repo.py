# storefront/repos/variant_repo.py
from typing import Dict, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductVariantModel


class VariantRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_variant(self, variant_id: int) -> ProductVariantModel | None:
        return self.db.get(ProductVariantModel, variant_id)

    def lock_variants(self, variant_ids: Sequence[int]) -> Dict[int, ProductVariantModel]:
        """
        Locking read stanu magazynowego.
        Kolejnosc po id zeby dwie transakcje nie zakleszczyly sie na tych samych wierszach.
        populate_existing nadpisuje ewentualnie nieaktualny stan z identity map.
        """
        variants = self.db.execute(
            select(ProductVariantModel)
            .where(ProductVariantModel.id.in_(sorted(set(variant_ids))))
            .order_by(ProductVariantModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()
        return {v.id: v for v in variants}
