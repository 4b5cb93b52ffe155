"""
Vehicle and Trip models - closed trips ingested from the RPS report.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum
from datetime import datetime
from routesync.db.database import Base


class VehicleType(str, enum.Enum):
    TRUCK = "TRUCK"
    CONTAINER = "CONTAINER"
    OTHER = "OTHER"


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_number = Column(String, nullable=False, unique=True)
    vehicle_type = Column(
        SQLEnum(
            VehicleType,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        default=VehicleType.OTHER.value,
    )
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    trips = relationship("Trip", back_populates="vehicle")


class Trip(Base):
    __tablename__ = "trips"
    __table_args__ = (
        UniqueConstraint(
            "vehicle_number", "route_start_date_time", "route_name", "rps_no",
            name="uq_trip_scraper_key",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_number = Column(String, ForeignKey("vehicles.vehicle_number"), nullable=False)
    rps_no = Column(String, nullable=False)
    route_name = Column(String, nullable=False)  # whitespace-free route name from the RPS report
    route_start_date_time = Column(DateTime, nullable=False)
    route_reaching_date_time = Column(DateTime, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    vehicle = relationship("Vehicle", back_populates="trips")
