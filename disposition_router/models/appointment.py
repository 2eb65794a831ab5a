"""
CalendarAppointment model: local record of an appointment booked by an auto-action.
"""
from sqlalchemy import Column, Text, DateTime
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class CalendarAppointment(Base):
    __tablename__ = 'calendar_appointments'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False)
    lead_id = Column(Text, nullable=True, index=True)
    title = Column(Text, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    timezone = Column(Text, default='America/New_York')
    status = Column(Text, default='scheduled')
    created_at = Column(DateTime(timezone=True), server_default=func.now())
