"""
Main API router.
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.api.v1 import auth, taxis, drivers, stats, recordings, available_drivers

api_router = APIRouter()

# Every fleet endpoint sits behind the session gate
protected = [Depends(get_current_user)]

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(taxis.router, prefix="/taxis", tags=["taxis"], dependencies=protected)
api_router.include_router(drivers.router, prefix="/drivers", tags=["drivers"], dependencies=protected)
api_router.include_router(stats.router, prefix="/stats", tags=["stats"], dependencies=protected)
api_router.include_router(recordings.router, prefix="/recordings", tags=["recordings"], dependencies=protected)
api_router.include_router(available_drivers.router, prefix="/available-drivers", tags=["available-drivers"])
