from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, String, Text

from app.core.database import RestaurantBase, utcnow

RESERVATION_STATUSES = ("pending", "confirmed", "cancelled", "completed")


class Reservation(RestaurantBase):
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint(
            "reservation_status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="ck_reservations_status",
        ),
        CheckConstraint("guests >= 1", name="ck_reservations_guests_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    guests = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String, nullable=False)
    reservation_status = Column(String, nullable=False, default="pending", index=True)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
