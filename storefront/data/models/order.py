from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from storefront.data.database import Base
from storefront.domain.order_state import OrderStatus


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    prepared_at = Column(DateTime(timezone=True), nullable=True)
    prepared_by = Column(Integer, ForeignKey("accounts.id"), nullable=True)

    tracking_number = Column(String(100), nullable=True)
    carrier = Column(String(100), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True, index=True)
    shipped_by = Column(Integer, ForeignKey("accounts.id"), nullable=True)

    delivered_at = Column(DateTime(timezone=True), nullable=True)

    cancel_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(Integer, ForeignKey("accounts.id"), nullable=True)

    # kilka FK do accounts (prepared_by, shipped_by...), wlasciciel wskazany jawnie
    account = relationship("AccountModel", foreign_keys=[account_id])
    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )

    __table_args__ = (
        UniqueConstraint("tracking_number", "carrier", name="u_order_tracking_carrier"),
    )

    @property
    def username(self) -> str | None:
        return self.account.username if self.account is not None else None

    @property
    def email(self) -> str | None:
        return self.account.email if self.account is not None else None
