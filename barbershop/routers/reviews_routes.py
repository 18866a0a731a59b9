# barbershop/routers/reviews_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Barber, Review, User
from barbershop.schemas import ReviewCreate, ReviewPublic
from barbershop.auth import get_current_user
from barbershop.store import REMOVED_CLIENT

router = APIRouter(
    prefix="/reviews",
    tags=["reviews"],
)


def review_to_dict(review: Review, reviewer) -> dict:
    return {
        "id": review.id,
        "rating": review.rating,
        "comment": review.comment,
        "barber_id": review.barber_id,
        "reviewer_name": (reviewer.name or REMOVED_CLIENT) if reviewer else REMOVED_CLIENT,
        "created_at": review.created_at,
    }


@router.get("", response_model=List[ReviewPublic])
def list_reviews(session: Session = Depends(get_session)):
    rows = session.exec(
        select(Review, User)
        .join(User, Review.client_id == User.id, isouter=True)
        .order_by(Review.created_at.desc(), Review.id.desc())
    ).all()
    return [review_to_dict(review, reviewer) for review, reviewer in rows]


@router.post("", response_model=ReviewPublic, status_code=201)
def create_review(
    review: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if review.barber_id is not None and session.get(Barber, review.barber_id) is None:
        raise HTTPException(status_code=404, detail="Barber Not Found")

    db_review = Review(
        client_id=current_user["id"],
        barber_id=review.barber_id,
        rating=review.rating,
        comment=review.comment,
    )
    session.add(db_review)
    session.commit()
    session.refresh(db_review)

    reviewer = session.get(User, current_user["id"])
    return review_to_dict(db_review, reviewer)
