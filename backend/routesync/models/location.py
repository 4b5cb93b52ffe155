"""
Location model - named places with coordinates, used for fuzzy fallback.
"""
from sqlalchemy import Column, Integer, String, Float
from routesync.db.database import Base


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
