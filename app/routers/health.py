from fastapi import APIRouter, Depends
import time
import os

from app.db import Database
from app.routers.deps import get_database

router = APIRouter(prefix="/ops", tags=["ops"])

# Store startup time for uptime calculation
startup_time = time.time()


@router.get("/db-health")
async def db_health(database: Database = Depends(get_database)):
    """Simple database health check"""
    ok = await database.healthcheck()
    return {"success": ok, "data": {"db_ok": ok}}


@router.get("/status")
async def status():
    return {
        "success": True,
        "data": {
            "uptime_seconds": round(time.time() - startup_time, 2),
            "process_id": os.getpid(),
        },
    }
