"""
Live route snapshot models - one LiveRoute per matched route, with its vehicles.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Float, Integer
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from routesync.db.database import Base
from routesync.models._types import JSONType, route_side_column_type


class LiveRoute(Base):
    __tablename__ = "live_routes"

    id = Column(String, primary_key=True)  # same id as the reference route
    source = Column(String, nullable=False)
    destination = Column(String, nullable=False)
    source_lat = Column(Float, nullable=True)
    source_lng = Column(Float, nullable=True)
    dest_lat = Column(Float, nullable=True)
    dest_lng = Column(Float, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    vehicles = relationship("LiveVehicle", back_populates="route", cascade="all, delete-orphan")


class LiveVehicle(Base):
    __tablename__ = "live_vehicles"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    route_id = Column(String, ForeignKey("live_routes.id"), nullable=False)
    direction = Column(route_side_column_type(), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # order within the direction bucket

    vehicle_number = Column(String, nullable=True)
    rps_number = Column(String, nullable=True)
    dispatch_date = Column(DateTime, nullable=True)
    last_location_date = Column(DateTime, nullable=True)
    last_location = Column(String, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    expected_arrival = Column(DateTime, nullable=True)
    late_hours = Column(Float, nullable=True)
    middle_stops = Column(JSONType, nullable=True)

    # Relationships
    route = relationship("LiveRoute", back_populates="vehicles")
