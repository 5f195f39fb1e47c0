from sqlalchemy import Column, DateTime, Integer, String

from app.core.database import DashboardBase, utcnow

USER_ROLES = ("employee", "director")


class User(DashboardBase):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="employee")  # employee | director
    created_at = Column(DateTime, default=utcnow)
