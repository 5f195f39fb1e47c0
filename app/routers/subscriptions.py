from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, EmailStr
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.deps import require_director, require_staff
from app.models.subscription import Subscription
from app.models.user import User
from app.services.audit import log_action

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


class SubscriptionOut(BaseModel):
    id: int
    email: str
    createdAt: str | None = None


class SubscriptionCreate(BaseModel):
    email: EmailStr


def _subscription_to_dict(subscription: Subscription) -> dict:
    return {
        "id": subscription.id,
        "email": subscription.email,
        "createdAt": subscription.created_at.isoformat() if subscription.created_at else None,
    }


def list_subscriber_emails(db: Session) -> list[str]:
    rows = db.query(Subscription.email).order_by(Subscription.id.asc()).all()
    return [email for (email,) in rows]


@router.get("", response_model=List[SubscriptionOut])
def list_subscriptions(db: Session = Depends(get_db), _user: User = Depends(require_staff)):
    subscriptions = (
        db.query(Subscription)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .all()
    )
    return [_subscription_to_dict(item) for item in subscriptions]


@router.post("", response_model=SubscriptionOut, status_code=status.HTTP_201_CREATED)
def subscribe(payload: SubscriptionCreate, response: Response, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    existing = db.query(Subscription).filter(Subscription.email == email).first()
    if existing:
        response.status_code = status.HTTP_200_OK
        return _subscription_to_dict(existing)

    subscription = Subscription(email=email)
    db.add(subscription)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent signup with the same address.
        db.rollback()
        existing = db.query(Subscription).filter(Subscription.email == email).first()
        if existing is None:
            raise
        response.status_code = status.HTTP_200_OK
        return _subscription_to_dict(existing)
    db.refresh(subscription)
    return _subscription_to_dict(subscription)


@router.delete("/{subscription_id}")
def delete_subscription(
    subscription_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    subscription = db.query(Subscription).filter(Subscription.id == subscription_id).first()
    if not subscription:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")

    email = subscription.email
    db.delete(subscription)
    log_action(
        db,
        user_id=user.id,
        action="subscription_deleted",
        entity_type="subscription",
        entity_id=subscription_id,
        meta={"email": email},
    )
    db.commit()
    return {"message": "Subscription deleted successfully"}
