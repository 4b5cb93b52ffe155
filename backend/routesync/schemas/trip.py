"""
RPS trip ingestion schemas.
"""
from pydantic import BaseModel


class TripIngestSummary(BaseModel):
    parsed: int
    recent: int
    inserted: int
