"""
Route model - curated route reference (source, destination, side, stops).
"""
from sqlalchemy import Column, String, DateTime, Float
import uuid
from datetime import datetime
from routesync.db.database import Base
from routesync.models._types import JSONType, route_side_column_type


class Route(Base):
    __tablename__ = "routes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    route_name = Column(String, nullable=False, unique=True)
    route_side = Column(route_side_column_type(), nullable=True)  # Up / Down, unset for new routes
    source = Column(String, nullable=True)
    destination = Column(String, nullable=True)
    middle_stops = Column(JSONType, nullable=True)  # ordered list of stop names

    # Stored endpoint coordinates (fallback after telemetry lookups)
    source_lat = Column(Float, nullable=True)
    source_lng = Column(Float, nullable=True)
    destination_lat = Column(Float, nullable=True)
    destination_lng = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
