from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.database import get_db, utcnow
from app.deps import require_director, require_staff
from app.models.review import Review
from app.models.user import User
from app.services.audit import log_action

router = APIRouter(prefix="/api/reviews", tags=["reviews"])

RECENT_REVIEWS_LIMIT = 5


class ReviewOut(BaseModel):
    id: int
    name: str
    rating: int
    comment: str
    recommend: bool
    response: Optional[str] = None
    respondedAt: Optional[str] = None
    date: Optional[str] = None


class ReviewCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=120)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=5000)
    recommend: bool = False


class ReviewResponsePayload(BaseModel):
    response: str = Field(..., min_length=1, max_length=5000)


def _review_to_dict(review: Review) -> dict:
    return {
        "id": review.id,
        "name": review.name,
        "rating": review.rating,
        "comment": review.comment,
        "recommend": bool(review.recommend),
        "response": review.response,
        "respondedAt": review.responded_at.isoformat() if review.responded_at else None,
        "date": review.created_at.isoformat() if review.created_at else None,
    }


def _get_review_or_404(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    return review


def _newest_first(db: Session):
    return db.query(Review).order_by(Review.created_at.desc(), Review.id.desc())


@router.get("", response_model=List[ReviewOut])
def list_reviews(db: Session = Depends(get_db), _user: User = Depends(require_staff)):
    return [_review_to_dict(review) for review in _newest_first(db).all()]


@router.get("/recent", response_model=List[ReviewOut])
def recent_reviews(db: Session = Depends(get_db), _user: User = Depends(require_staff)):
    return [_review_to_dict(review) for review in _newest_first(db).limit(RECENT_REVIEWS_LIMIT).all()]


@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
def create_review(payload: ReviewCreate, db: Session = Depends(get_db)):
    comment = payload.comment.strip()
    if not comment:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment is required")

    review = Review(
        name=(payload.name or "").strip() or "Anonymous",
        rating=payload.rating,
        comment=comment,
        recommend=payload.recommend,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return _review_to_dict(review)


@router.post("/{review_id}/respond", response_model=ReviewOut)
def respond_to_review(
    review_id: int,
    payload: ReviewResponsePayload,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff),
):
    text = payload.response.strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Response cannot be empty")

    review = _get_review_or_404(db, review_id)
    review.response = text
    review.responded_at = utcnow()
    log_action(db, user_id=user.id, action="review_responded", entity_type="review", entity_id=review.id)
    db.commit()
    db.refresh(review)
    return _review_to_dict(review)


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    review = _get_review_or_404(db, review_id)
    db.delete(review)
    log_action(
        db,
        user_id=user.id,
        action="review_deleted",
        entity_type="review",
        entity_id=review_id,
        meta={"rating": review.rating},
    )
    db.commit()
    return {"message": "Review deleted", "id": review_id}
