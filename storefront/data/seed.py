# storefront/data/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import AccountModel, ProductModel, ProductVariantModel

ACCOUNTS = [
    {"username": "admin", "email": "admin@storefront.local", "role": "admin"},
    {"username": "staff", "email": "staff@storefront.local", "role": "employee"},
    {"username": "alice", "email": "alice@example.com", "role": "customer"},
]

PRODUCTS = [
    {"name": "Classic Tee", "price": Decimal("499.00"), "variants": [("unisex", "S", 20), ("unisex", "M", 20), ("unisex", "L", 10)]},
    {"name": "Running Shorts", "price": Decimal("799.50"), "variants": [("male", "M", 8), ("female", "S", 8)]},
    {"name": "Hoodie", "price": Decimal("1299.00"), "variants": [("unisex", "L", 5)]},
]


def seed(db: Session | None = None) -> bool:
    """Zasiewa dane demo, tylko gdy baza jest pusta. Zwraca True jesli cos dodano."""
    own_session = db is None
    db = db or SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(AccountModel).first():
            return False

        db.add_all(AccountModel(**a) for a in ACCOUNTS)
        for p in PRODUCTS:
            product = ProductModel(name=p["name"], price=p["price"])
            product.variants = [
                ProductVariantModel(gender=gender, size=size, quantity=qty)
                for gender, size, qty in p["variants"]
            ]
            db.add(product)
        db.commit()
        return True
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    seed()
