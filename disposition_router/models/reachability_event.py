"""
ReachabilityEvent model: generic per-lead event log.
"""
from sqlalchemy import Column, Text, DateTime, JSON
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class ReachabilityEvent(Base):
    __tablename__ = 'reachability_events'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False)
    lead_id = Column(Text, nullable=False, index=True)
    event_type = Column(Text, nullable=False)
    event_outcome = Column(Text, nullable=True)
    metadata_ = Column('metadata', JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
