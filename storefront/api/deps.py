# storefront/api/deps.py
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import Forbidden, Unauthorized
from storefront.domain.principal import Principal
from storefront.services.cart_service import CartService
from storefront.services.fulfillment_service import FulfillmentService
from storefront.services.identity_client import IdentityClient
from storefront.services.order_service import OrderService


def get_identity_client() -> IdentityClient:
    return IdentityClient()


def get_principal(
    authorization: str | None = Header(default=None),
    identity: IdentityClient = Depends(get_identity_client),
) -> Principal:
    #Authorization: Bearer <token>
    if not authorization:
        raise Unauthorized("Unauthorized. Please log in.")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Unauthorized. Malformed authorization header.")

    return identity.resolve(token.strip())


def require_staff(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_staff:
        raise Forbidden("Access denied. Only admins and employees can access this resource.")
    return principal


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_fulfillment_service(db: Session = Depends(get_db)) -> FulfillmentService:
    return FulfillmentService(db)
