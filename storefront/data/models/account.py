from sqlalchemy import Column, Integer, String
from storefront.data.database import Base


class AccountModel(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="customer")  # customer, employee, admin
