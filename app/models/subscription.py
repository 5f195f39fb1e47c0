from sqlalchemy import Column, DateTime, Integer, String

from app.core.database import RestaurantBase, utcnow


class Subscription(RestaurantBase):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
