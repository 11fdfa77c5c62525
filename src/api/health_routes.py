"""
FastAPI route handlers for basic endpoints (health, ping)
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from datetime import datetime
import time

from src.config.database import get_db_manager
from src.core.config import APP_CONFIG
from src.database.db_manager import DBManager

router = APIRouter()

# Global variables for uptime tracking
startup_time = time.time()


@router.get("/ping")
def ping():
    """
    ✅ Simple ping endpoint to check if server is alive
    """
    return {
        "message": "pong",
        "timestamp": datetime.now().isoformat(),
        "status": "healthy",
    }


@router.get("/health")
def health_check(db_manager: DBManager = Depends(get_db_manager)):
    """
    ✅ Health check including the database connection
    """
    database_ok = db_manager.ping()
    body = {
        "status": "healthy" if database_ok else "degraded",
        "timestamp": datetime.now().isoformat(),
        "uptime_seconds": round(time.time() - startup_time, 1),
        "environment": APP_CONFIG["env"],
        "database": {
            "status": "connected" if database_ok else "unreachable",
            "name": db_manager.db_name,
        },
    }
    return JSONResponse(status_code=200 if database_ok else 503, content=body)
