from sqlalchemy import Column, Integer, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    #cena z momentu zakupu, nigdy nie przeliczana z products.price
    price_at_purchase = Column(Numeric(10, 2), nullable=False)

    order = relationship("OrderModel", back_populates="items")
    variant = relationship("ProductVariantModel")

    @property
    def product_name(self) -> str | None:
        return self.variant.product.name if self.variant is not None else None

    @property
    def size(self) -> str | None:
        return self.variant.size if self.variant is not None else None

    @property
    def gender(self) -> str | None:
        return self.variant.gender if self.variant is not None else None
