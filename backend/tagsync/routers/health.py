from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session, text

from tagsync.db import get_session

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(session: Session = Depends(get_session)):
    db_status = "ok"
    try:
        session.exec(text("SELECT 1"))
    except Exception as exc:
        db_status = f"error: {exc}"

    return {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "service": "tagsync",
        "version": "0.1.0",
        "checks": {
            "database": db_status,
        },
    }


@router.get("/health/ready")
async def readiness(session: Session = Depends(get_session)):
    try:
        session.exec(text("SELECT 1"))
    except Exception as exc:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not ready",
                "service": "tagsync",
                "error": str(exc),
            },
        )

    return {
        "status": "ready",
        "service": "tagsync",
    }
