"""Review schemas."""
from datetime import datetime
from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    booking_id: int
    property_id: int
    property_rating: int = Field(ge=1, le=5)
    property_review: str | None = None
    host_rating: int | None = Field(None, ge=1, le=5)
    host_review: str | None = None


class ReviewUpdate(BaseModel):
    """All optional; only provided fields are updated."""
    property_rating: int | None = Field(None, ge=1, le=5)
    property_review: str | None = None
    host_rating: int | None = Field(None, ge=1, le=5)
    host_review: str | None = None


class ReviewResponse(BaseModel):
    id: int
    booking_id: int
    property_id: int
    author_id: int
    author_name: str | None = None
    property_rating: int
    property_review: str | None = None
    host_rating: int | None = None
    host_review: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class UserReviewResponse(ReviewResponse):
    property_title: str | None = None
    property_city: str | None = None


def review_to_response(review) -> ReviewResponse:
    data = ReviewResponse.model_validate(review)
    data.author_name = review.author.name if review.author else None
    return data
