"""
PhoneNumber model: the user's own outbound numbers; send_sms picks an active one.
"""
from sqlalchemy import Column, Text, DateTime
from sqlalchemy.sql import func

from disposition_router.database import Base, new_id


class PhoneNumber(Base):
    __tablename__ = 'phone_numbers'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False, index=True)
    number = Column(Text, nullable=False)
    status = Column(Text, default='active')
    created_at = Column(DateTime(timezone=True), server_default=func.now())
