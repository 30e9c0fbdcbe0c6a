# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import (
    get_cart_service,
    get_fulfillment_service,
    get_order_service,
    get_principal,
    require_staff,
)
from storefront.domain.order_state import Action
from storefront.domain.principal import Principal
from storefront.domain.schemas import (
    CancelIn,
    OrderCreate,
    OrderCreated,
    OrderOut,
    ShipIn,
    TransitionOut,
)
from storefront.services.cart_service import CartService
from storefront.services.fulfillment_service import FulfillmentService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderCreated, status_code=201)
def create_order(
    payload: OrderCreate,
    principal: Principal = Depends(get_principal),
    carts: CartService = Depends(get_cart_service),
    orders: OrderService = Depends(get_order_service),
):
    """
    Tworzy zamowienie z wybranych pozycji koszyka.
    Potwierdzenie mailem wysylane asynchronicznie.
    """
    snapshot = carts.resolve_selection(principal.account_id, payload.cart_item_ids)
    order_id = orders.commit_order(principal.account_id, snapshot, payload.note)
    return OrderService.to_created(order_id, snapshot)


@router.get("", response_model=List[OrderOut])
def list_my_orders(
    principal: Principal = Depends(get_principal),
    orders: OrderService = Depends(get_order_service),
):
    return orders.list_orders(principal.account_id)


@router.get("/all", response_model=List[OrderOut])
def list_all_orders(
    principal: Principal = Depends(require_staff),
    orders: OrderService = Depends(get_order_service),
):
    return orders.list_all_orders()


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    principal: Principal = Depends(get_principal),
    orders: OrderService = Depends(get_order_service),
):
    return orders.get_order(principal, order_id)


@router.post("/{order_id}/prepare", response_model=TransitionOut)
def prepare_order(
    order_id: int,
    principal: Principal = Depends(get_principal),
    svc: FulfillmentService = Depends(get_fulfillment_service),
):
    status = svc.transition_order(order_id, Action.PREPARE, principal)
    return {"order_id": order_id, "status": status.value}


@router.post("/{order_id}/ship", response_model=TransitionOut)
def ship_order(
    order_id: int,
    payload: ShipIn,
    principal: Principal = Depends(get_principal),
    svc: FulfillmentService = Depends(get_fulfillment_service),
):
    status = svc.transition_order(order_id, Action.SHIP, principal, payload.model_dump())
    return {"order_id": order_id, "status": status.value}


@router.post("/{order_id}/deliver", response_model=TransitionOut)
def deliver_order(
    order_id: int,
    principal: Principal = Depends(get_principal),
    svc: FulfillmentService = Depends(get_fulfillment_service),
):
    status = svc.transition_order(order_id, Action.DELIVER, principal)
    return {"order_id": order_id, "status": status.value}


@router.post("/{order_id}/cancel", response_model=TransitionOut)
def cancel_order(
    order_id: int,
    payload: CancelIn,
    principal: Principal = Depends(get_principal),
    svc: FulfillmentService = Depends(get_fulfillment_service),
):
    status = svc.transition_order(order_id, Action.CANCEL, principal, payload.model_dump())
    return {"order_id": order_id, "status": status.value}
