# barbershop/routers/products_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Product
from barbershop.schemas import ProductBase, ProductPublic, ProductUpdate
from barbershop.auth import get_current_user
from barbershop.deps import require_role

router = APIRouter(
    prefix="/products",
    tags=["products"],
)


@router.get("", response_model=List[ProductPublic])
def list_products(
    category: Optional[str] = None,
    session: Session = Depends(get_session),
):
    stmt = select(Product)
    if category:
        stmt = stmt.where(Product.category == category)
    return session.exec(stmt.order_by(Product.name)).all()


@router.get("/{product_id}", response_model=ProductPublic)
def get_product(product_id: int, session: Session = Depends(get_session)):
    product = session.get(Product, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product Not Found")
    return product


@router.post("", response_model=ProductPublic, status_code=201)
def create_product(
    product: ProductBase,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_product = Product(**product.model_dump())
    session.add(db_product)
    session.commit()
    session.refresh(db_product)
    return db_product


@router.patch("/{product_id}", response_model=ProductPublic)
def update_product(
    product_id: int,
    update: ProductUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_product = session.get(Product, product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product Not Found")

    for key, value in update.model_dump(exclude_unset=True).items():
        setattr(db_product, key, value)

    session.add(db_product)
    session.commit()
    session.refresh(db_product)
    return db_product


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_product = session.get(Product, product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product Not Found")

    session.delete(db_product)
    session.commit()
