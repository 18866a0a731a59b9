# barbershop/routers/orders_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Order, Product
from barbershop.schemas import CheckoutRequest, OrderPublic
from barbershop.auth import get_current_user
from barbershop.deps import require_role
from barbershop.cart import Cart, CartError, generate_pickup_code

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["orders"],
)

CODE_ATTEMPTS = 5


def get_order_by_code(session: Session, code: str) -> Order:
    # codes are stored in uppercase
    order = session.exec(
        select(Order).where(Order.code == code.strip().upper())
    ).first()
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/orders/checkout", response_model=OrderPublic, status_code=201)
def checkout(
    request: CheckoutRequest,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # 1) Build the cart from current product data
    cart = Cart()
    products = {}
    for line in request.items:
        product = session.get(Product, line.product_id)
        if product is None:
            raise HTTPException(status_code=404, detail=f"Product {line.product_id} not found")
        products[product.id] = product
        try:
            cart.add(product.id, product.name, product.price, product.stock, quantity=line.quantity)
        except CartError as exc:
            raise HTTPException(status_code=409, detail=str(exc))

    # 2) Payment is simulated; take the stock and record the order
    for item in cart.items:
        products[item.product_id].stock -= item.quantity
        session.add(products[item.product_id])

    for _ in range(CODE_ATTEMPTS):
        order = Order(
            client_id=current_user["id"],
            items=cart.lines(),
            total=cart.total,
            status="pending",
            code=generate_pickup_code(),
        )
        session.add(order)
        try:
            session.commit()
            break
        except IntegrityError:
            # pickup code collision; stock changes were rolled back too
            session.rollback()
            for item in cart.items:
                product = session.get(Product, item.product_id)
                product.stock -= item.quantity
                session.add(product)
    else:
        raise HTTPException(status_code=500, detail="Could not allocate a pickup code")

    session.refresh(order)
    logger.info("Order %s placed by client %s: %d items, total %.2f", order.code, order.client_id, cart.item_count, order.total)
    return order


@router.get("/orders/me", response_model=List[OrderPublic])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return session.exec(
        select(Order)
        .where(Order.client_id == current_user["id"])
        .order_by(Order.created_at.desc(), Order.id.desc())
    ).all()


@router.patch("/orders/{order_id}/cancel", response_model=OrderPublic)
def cancel_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    order = session.get(Order, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.client_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    if order.status != "pending":
        raise HTTPException(status_code=409, detail=f"Order already {order.status}")

    # give the stock back
    for line in order.items:
        product = session.get(Product, line["product_id"])
        if product is not None:
            product.stock += line["quantity"]
            session.add(product)

    order.status = "cancelled"
    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info("Order %s cancelled by client %s", order.code, current_user["id"])
    return order


@router.get("/admin/orders/{code}", response_model=OrderPublic)
def verify_order(
    code: str,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    return get_order_by_code(session, code)


@router.patch("/admin/orders/{code}/deliver", response_model=OrderPublic)
def deliver_order(
    code: str,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    order = get_order_by_code(session, code)
    if order.status != "pending":
        raise HTTPException(status_code=409, detail=f"Order already {order.status}")

    order.status = "delivered"
    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info("Order %s delivered", order.code)
    return order
