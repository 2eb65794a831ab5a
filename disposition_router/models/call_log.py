"""
CallLog model: read by the router for call end time and campaign.
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class CallLog(Base):
    __tablename__ = 'call_logs'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False)
    lead_id = Column(Text, nullable=True, index=True)
    campaign_id = Column(Text, nullable=True)
    phone_number = Column(Text, nullable=True)
    outcome = Column(Text, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
