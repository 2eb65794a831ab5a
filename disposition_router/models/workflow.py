"""
Nurture-sequence enrollment and dialing-queue rows.

Removal is a status change to 'removed'; rows are never deleted so the
enrollment history survives.
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class LeadWorkflowProgress(Base):
    __tablename__ = 'lead_workflow_progress'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False)
    lead_id = Column(Text, nullable=False, index=True)
    workflow_id = Column(Text, nullable=False)
    campaign_id = Column(Text, nullable=True)
    current_step = Column(Integer, default=0)
    status = Column(Text, nullable=False, default='active')  # active/paused/completed/removed
    removal_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)


class DialingQueueEntry(Base):
    __tablename__ = 'dialing_queues'

    id = Column(Text, primary_key=True, default=new_id)
    campaign_id = Column(Text, nullable=True)
    lead_id = Column(Text, nullable=False, index=True)
    status = Column(Text, nullable=False, default='pending')  # pending/scheduled/calling/completed/removed
    priority = Column(Integer, default=1)
    attempts = Column(Integer, default=0)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
