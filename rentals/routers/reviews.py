"""Reviews of completed stays."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rentals.database import get_db
from rentals.dependencies import get_current_user
from rentals.errors import NotFound
from rentals.models.user import User
from rentals.repositories import PropertyRepository, ReviewRepository
from rentals.schemas.review import (
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
    UserReviewResponse,
    review_to_response,
)
from rentals.services.reviews import create_review, delete_review, update_review

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("/property/{property_id}", response_model=list[ReviewResponse])
def property_reviews(property_id: int, db: Session = Depends(get_db)):
    if not PropertyRepository(db).get(property_id):
        raise NotFound("Property not found")
    return [review_to_response(r) for r in ReviewRepository(db).for_property(property_id)]


@router.get("/user", response_model=list[UserReviewResponse])
def my_reviews(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    out = []
    for review, prop in ReviewRepository(db).for_author(current_user.id):
        data = UserReviewResponse.model_validate(review)
        data.author_name = current_user.name
        data.property_title = prop.title
        data.property_city = prop.city
        out.append(data)
    return out


@router.post("", response_model=ReviewResponse, status_code=201)
def create(data: ReviewCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    review = create_review(db, current_user, **data.model_dump())
    return review_to_response(review)


@router.put("/{booking_id}", response_model=ReviewResponse)
def update(
    booking_id: int,
    data: ReviewUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    review = update_review(db, current_user, booking_id, data.model_dump(exclude_unset=True, exclude_none=True))
    return review_to_response(review)


@router.delete("/{booking_id}")
def delete(booking_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    delete_review(db, current_user, booking_id)
    return {"message": "Review deleted successfully"}
