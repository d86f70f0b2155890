from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Index
from sqlalchemy.sql import func
from app.database.connection import Base
from app.models.status import NotificationType


class Notification(Base):
    """In-app notification channel"""
    __tablename__ = "notifications"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False, default=NotificationType.INFO.value)  # 'info' | 'warning' | 'success' | 'error'
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    module = Column(String, nullable=True)
    entity_type = Column(String, nullable=True)
    entity_id = Column(String, nullable=True)
    action_url = Column(String, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (
        Index('idx_notifications_user_unread', 'user_id', 'is_read'),
    )
