from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Text

from app.core.database import DashboardBase, utcnow


class Review(DashboardBase):
    __tablename__ = "reviews"
    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, default="Anonymous")
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    recommend = Column(Boolean, nullable=False, default=False)
    response = Column(Text, nullable=True)
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
