"""
Main FastAPI application entry point.
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from routesync.api import live_routes, unmatched_routes, trips
from routesync.db.database import engine, Base

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Live Route Sync",
    description="Live fleet route dashboard: export ingestion, route matching and snapshots",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],  # React dev servers
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(live_routes.router, prefix="/api/live-routes", tags=["live-routes"])
app.include_router(unmatched_routes.router, prefix="/api/unmatched-routes", tags=["unmatched-routes"])
app.include_router(trips.router, prefix="/api/trips", tags=["trips"])


@app.get("/")
async def root():
    return {"message": "Live Route Sync API"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
