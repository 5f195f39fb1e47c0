from sqlalchemy import Column, DateTime, Integer, String

from app.core.database import DashboardBase, utcnow

STAFF_ROLES = {
    "waiter": "Waiter",
    "chef": "Chef",
    "manager": "Manager",
    "cleaner": "Cleaner",
    "director": "Director",
    "other": "Other",
}
STAFF_STATUSES = {
    "active": "Active",
    "inactive": "Inactive",
    "on-leave": "On Leave",
}


class Staff(DashboardBase):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    # Free text: custom roles are stored as typed and bucketed under "other" on listing.
    role = Column(String, nullable=False)
    status = Column(String, nullable=False, default="active")
    image = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
