"""
Disposition catalog + user-defined auto-action rules.

A Disposition is reference data during routing; an optional pipeline_stage
names the board a lead is auto-moved to. DispositionAutoAction rows map a
disposition (by id, or by a name the rule's disposition_name contains) to
one action from the fixed vocabulary in services.actions.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class Disposition(Base):
    __tablename__ = 'dispositions'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(Text, default='#3B82F6')
    pipeline_stage = Column(Text, nullable=True)
    auto_actions = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description,
            'color': self.color,
            'pipeline_stage': self.pipeline_stage,
            'auto_actions': self.auto_actions or [],
        }


class DispositionAutoAction(Base):
    __tablename__ = 'disposition_auto_actions'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False, index=True)
    disposition_id = Column(Text, ForeignKey('dispositions.id'), nullable=True)
    disposition_name = Column(Text, nullable=True)
    action_type = Column(Text, nullable=False)
    action_config = Column(JSON, default=dict)
    priority = Column(Integer, default=0)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'disposition_id': self.disposition_id,
            'disposition_name': self.disposition_name,
            'action_type': self.action_type,
            'action_config': self.action_config or {},
            'priority': self.priority,
            'active': bool(self.active),
        }
