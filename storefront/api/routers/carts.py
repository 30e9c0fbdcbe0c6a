#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_cart_service, get_principal
from storefront.domain.principal import Principal
from storefront.domain.schemas import CartItemIn, CartOut, SelectionIn, SnapshotOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(
    principal: Principal = Depends(get_principal),
    svc: CartService = Depends(get_cart_service),
):
    return svc.get_cart(principal.account_id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: CartItemIn,
    principal: Principal = Depends(get_principal),
    svc: CartService = Depends(get_cart_service),
):
    return svc.add_item(principal.account_id, payload.variant_id, payload.quantity)


@router.delete("/items/{cart_item_id}", response_model=CartOut)
def remove_item(
    cart_item_id: int,
    principal: Principal = Depends(get_principal),
    svc: CartService = Depends(get_cart_service),
):
    return svc.remove_item(principal.account_id, cart_item_id)


@router.post("/preview", response_model=SnapshotOut)
def preview_selection(
    payload: SelectionIn,
    principal: Principal = Depends(get_principal),
    svc: CartService = Depends(get_cart_service),
):
    """
    Wycena wybranych pozycji bez skladania zamowienia.
    """
    return svc.resolve_selection(principal.account_id, payload.cart_item_ids)
