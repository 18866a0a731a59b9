# barbershop/routers/gallery_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import GalleryImage
from barbershop.schemas import GalleryImageCreate, GalleryImagePublic, GalleryImageUpdate
from barbershop.auth import get_current_user
from barbershop.deps import require_role

router = APIRouter(
    prefix="/gallery",
    tags=["gallery"],
)


@router.get("", response_model=List[GalleryImagePublic])
def list_gallery(session: Session = Depends(get_session)):
    return session.exec(
        select(GalleryImage)
        .where(GalleryImage.visible == True)  # noqa: E712
        .order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc())
    ).all()


@router.get("/all", response_model=List[GalleryImagePublic])
def list_gallery_admin(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    return session.exec(
        select(GalleryImage).order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc())
    ).all()


@router.post("", response_model=GalleryImagePublic, status_code=201)
def add_image(
    image: GalleryImageCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_image = GalleryImage(**image.model_dump())
    session.add(db_image)
    session.commit()
    session.refresh(db_image)
    return db_image


@router.patch("/{image_id}", response_model=GalleryImagePublic)
def update_image(
    image_id: int,
    update: GalleryImageUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_image = session.get(GalleryImage, image_id)
    if db_image is None:
        raise HTTPException(status_code=404, detail="Image Not Found")

    for key, value in update.model_dump(exclude_unset=True).items():
        setattr(db_image, key, value)

    session.add(db_image)
    session.commit()
    session.refresh(db_image)
    return db_image


@router.delete("/{image_id}", status_code=204)
def delete_image(
    image_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_image = session.get(GalleryImage, image_id)
    if db_image is None:
        raise HTTPException(status_code=404, detail="Image Not Found")

    session.delete(db_image)
    session.commit()
