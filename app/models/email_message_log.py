from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from app.core.database import DashboardBase, utcnow


class EmailMessageLog(DashboardBase):
    __tablename__ = "email_message_log"

    id = Column(Integer, primary_key=True)
    provider = Column(String, nullable=False)
    kind = Column(String, nullable=False)
    to_email = Column(String, nullable=True)
    recipients_count = Column(Integer, nullable=False, default=1)
    subject = Column(String, nullable=False)
    status = Column(String, nullable=False)  # sent | failed
    error = Column(Text, nullable=True)
    provider_message_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


Index("ix_email_message_log_kind_created", EmailMessageLog.kind, EmailMessageLog.created_at)
