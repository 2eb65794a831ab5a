"""
DispositionMetric model: append-only audit row, one per router invocation.

Captures before/after lead status and pipeline stage, how long after the call
ended the disposition was set, and the actions the cascade performed.
"""
from sqlalchemy import Column, Integer, Text, Float, DateTime, JSON
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class DispositionMetric(Base):
    __tablename__ = 'disposition_metrics'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False, index=True)
    lead_id = Column(Text, nullable=False, index=True)
    call_id = Column(Text, nullable=True)
    disposition_id = Column(Text, nullable=True)
    disposition_name = Column(Text, nullable=True)
    set_by = Column(Text, default='manual')             # ai / manual / automation
    set_by_user_id = Column(Text, nullable=True)
    ai_confidence_score = Column(Float, nullable=True)
    call_ended_at = Column(DateTime(timezone=True), nullable=True)
    disposition_set_at = Column(DateTime(timezone=True), nullable=False)
    time_to_disposition_seconds = Column(Integer, nullable=True)
    previous_status = Column(Text, nullable=True)
    new_status = Column(Text, nullable=True)
    previous_pipeline_stage = Column(Text, nullable=True)
    new_pipeline_stage = Column(Text, nullable=True)
    workflow_id = Column(Text, nullable=True)
    campaign_id = Column(Text, nullable=True)
    actions_triggered = Column(JSON, default=list)
    metadata_ = Column('metadata', JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
