"""
DNC list entry: one row per (user, phone number). Adds are upserts.
"""
from sqlalchemy import Column, Text, DateTime, UniqueConstraint
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class DncEntry(Base):
    __tablename__ = 'dnc_list'
    __table_args__ = (
        UniqueConstraint('user_id', 'phone_number', name='uq_dnc_user_phone'),
    )

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False)
    phone_number = Column(Text, nullable=False)
    reason = Column(Text, nullable=True)
    added_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
