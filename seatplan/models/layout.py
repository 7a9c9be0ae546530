"""
Table layout models
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from seatplan.core.db import Base

class TableConfiguration(Base):
    __tablename__ = "table_configurations"

    id = Column(Integer, primary_key=True, index=True)
    table_number = Column(Integer, unique=True, nullable=False, index=True)
    label = Column(String(255), nullable=False)
    x = Column(Float, nullable=False)
    y = Column(Float, nullable=False)
    seat_count = Column(Integer, nullable=False, default=10)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    seats = relationship(
        "SeatAssignment",
        back_populates="table",
        cascade="all, delete-orphan",
        order_by="SeatAssignment.seat_index",
    )


class SeatAssignment(Base):
    __tablename__ = "seat_assignments"

    id = Column(Integer, primary_key=True, index=True)
    table_configuration_id = Column(
        Integer, ForeignKey("table_configurations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    seat_index = Column(Integer, nullable=False)
    seat_angle = Column(Float, nullable=True)
    guest_name = Column(String(255), nullable=True)
    tag = Column(String(100), nullable=True)
    note = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    table = relationship("TableConfiguration", back_populates="seats")

    __table_args__ = (
        UniqueConstraint("table_configuration_id", "seat_index", name="uq_seat_per_table"),
    )
