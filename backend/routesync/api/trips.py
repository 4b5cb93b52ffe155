"""
RPS trip upload API endpoint.
"""
import logging
import time
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session
from routesync.db.database import get_db, settings
from routesync.schemas.trip import TripIngestSummary
from routesync.services.file_parser import infer_file_type, read_export
from routesync.services.rps_trips import ingest_rps_export

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/upload", response_model=TripIngestSummary, status_code=status.HTTP_201_CREATED)
async def upload_rps_export(
    file: UploadFile = File(...),
    db: Session = Depends(get_db)
):
    """Ingest closed trips from an RPS report export."""
    started = time.perf_counter()
    try:
        df = read_export(await file.read(), infer_file_type(file.filename or ""))
        summary = ingest_rps_export(
            db,
            df,
            cutoff_days=settings.rps_dispatch_cutoff_days,
            batch_size=settings.rps_insert_batch_size,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.exception("RPS ingestion failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"RPS ingestion failed: {str(e)}"
        )

    logger.info("Ingested RPS export %s in %.2fs: %s", file.filename, time.perf_counter() - started, summary)
    return summary
