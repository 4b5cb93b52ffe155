"""
UnmatchedTripSide model - route patterns seen in the export with no reference route.
"""
from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime
from routesync.db.database import Base
from routesync.models._types import route_side_column_type


class UnmatchedTripSide(Base):
    __tablename__ = "unmatched_trip_sides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    route_name = Column(String, nullable=False, unique=True)  # e.g., "LUCKNOW-11/STOP A/AMBALA(AML11)"
    source = Column(String, nullable=False)
    destination = Column(String, nullable=False)
    trip_side = Column(route_side_column_type(), nullable=True)  # filled in by a user later

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
