from sqlalchemy import Column, DateTime, Integer, String, Text

from app.core.database import DashboardBase, utcnow


class AuditLog(DashboardBase):
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=True)
    entity_id = Column(Integer, nullable=True)
    meta_json = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
