"""
Pipeline boards and lead positions.

LeadPipelinePosition is the current pointer: exactly one row per
(user, lead). Every move, automatic or manual, also appends a
LeadPipelineMove so the stage history is never overwritten.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class PipelineBoard(Base):
    __tablename__ = 'pipeline_boards'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    position = Column(Integer, default=0)
    disposition_id = Column(Text, ForeignKey('dispositions.id'), nullable=True)
    settings = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    disposition = relationship('Disposition', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description,
            'position': self.position,
            'disposition_id': self.disposition_id,
            'settings': self.settings,
            'disposition': self.disposition.to_dict() if self.disposition else None,
        }


class LeadPipelinePosition(Base):
    __tablename__ = 'lead_pipeline_positions'
    __table_args__ = (
        UniqueConstraint('user_id', 'lead_id', name='uq_pipeline_position_user_lead'),
    )

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False)
    lead_id = Column(Text, ForeignKey('leads.id'), nullable=False, index=True)
    pipeline_board_id = Column(Text, ForeignKey('pipeline_boards.id'), nullable=False)
    position = Column(Integer, default=0)
    moved_at = Column(DateTime(timezone=True), nullable=True)
    moved_by_user = Column(Boolean, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    board = relationship('PipelineBoard', lazy='joined')
    lead = relationship('Lead')

    def to_dict(self, include_lead=False):
        d = {
            'id': self.id,
            'user_id': self.user_id,
            'lead_id': self.lead_id,
            'pipeline_board_id': self.pipeline_board_id,
            'stage': self.board.name if self.board else None,
            'position': self.position,
            'moved_at': self.moved_at.isoformat() if self.moved_at else None,
            'moved_by_user': bool(self.moved_by_user),
            'notes': self.notes,
        }
        if include_lead:
            d['lead'] = self.lead.to_dict() if self.lead else None
        return d


class LeadPipelineMove(Base):
    __tablename__ = 'lead_pipeline_moves'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False)
    lead_id = Column(Text, ForeignKey('leads.id'), nullable=False, index=True)
    from_board_id = Column(Text, ForeignKey('pipeline_boards.id'), nullable=True)
    to_board_id = Column(Text, ForeignKey('pipeline_boards.id'), nullable=False)
    moved_at = Column(DateTime(timezone=True), nullable=False)
    moved_by_user = Column(Boolean, default=False)
    notes = Column(Text, nullable=True)
