"""
Lead model: a dialable contact owned by one user.

The disposition cascade mutates status / do_not_call / next_callback_at;
it never creates or deletes leads.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, JSON
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class Lead(Base):
    __tablename__ = 'leads'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False, index=True)
    phone_number = Column(Text, nullable=False)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    company = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default='new')
    do_not_call = Column(Boolean, default=False)
    next_callback_at = Column(DateTime(timezone=True), nullable=True)
    last_contacted_at = Column(DateTime(timezone=True), nullable=True)
    priority = Column(Integer, nullable=True)
    tags = Column(JSON, nullable=True)
    custom_fields = Column(JSON, nullable=True)
    timezone = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'phone_number': self.phone_number,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'status': self.status,
            'do_not_call': bool(self.do_not_call),
            'next_callback_at': self.next_callback_at.isoformat() if self.next_callback_at else None,
        }
