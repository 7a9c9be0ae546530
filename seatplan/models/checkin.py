"""
Check-in log model
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime

from seatplan.core.db import Base

class GuestCheckIn(Base):
    __tablename__ = "guest_checkins"

    id = Column(Integer, primary_key=True, index=True)
    guest_name = Column(String(255), nullable=False, index=True)
    table_number = Column(Integer, nullable=False)
    checked_in_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    checked_in_by = Column(String(255), nullable=False)
    checked_out_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
