from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Index, String, func
from sqlalchemy.dialects.postgresql import JSONB
from app.models import Base
from app.models.property import new_id


class Message(Base):
    __tablename__ = "messages"
    id = Column(String(32), primary_key=True, default=new_id)
    sender_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    property_id = Column(String(32), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    subject = Column(String(100), nullable=False)
    content = Column(String(1000), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True))
    type = Column(Enum('inquiry', 'response', 'general', name='messagetype'), nullable=False, default='inquiry')
    viewing_request = Column(JSONB)  # {requestedDate, requestedTime, status, notes}
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_messages_sender_receiver_created", "sender_id", "receiver_id", "created_at"),
        Index("ix_messages_receiver_is_read", "receiver_id", "is_read"),
    )


MESSAGE_FIELDS = {
    "id": "id",
    "sender": "sender_id",
    "receiver": "receiver_id",
    "property": "property_id",
    "subject": "subject",
    "content": "content",
    "isRead": "is_read",
    "readAt": "read_at",
    "type": "type",
    "viewingRequest": "viewing_request",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
