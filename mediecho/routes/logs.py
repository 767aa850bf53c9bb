from datetime import datetime
from math import ceil
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from mediecho.auth import get_current_user
from mediecho.database import get_db
from mediecho.models import Log, User
from mediecho.schemas import LogRequest, LogType
from mediecho.services import log_store
from mediecho.timeutils import to_utc_naive

router = APIRouter(prefix="/logs", tags=["logs"])


def serialize_log(log: Log) -> dict:
    return {
        "id": log.id,
        "type": log.type,
        "text": log.text,
        "tone": log.tone,
        "meta": log.meta or {},
        "created_at": log.created_at,
        "updated_at": log.updated_at,
    }


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Query datetimes without an offset are taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return to_utc_naive(value)


@router.post("", status_code=201)
def create_log(
    data: LogRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    log = log_store.create_log(db, user.id, data.to_store())
    return {"success": True, "log": serialize_log(log)}


@router.get("")
def list_logs(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    type: Optional[LogType] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the caller's logs, newest first."""
    logs, total = log_store.list_logs(
        db,
        user.id,
        start=_as_utc(start),
        end=_as_utc(end),
        log_type=type,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "logs": [serialize_log(log) for log in logs],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": ceil(total / limit),
        },
    }


@router.get("/stats/summary")
def log_stats(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Count and most recent entry per log type."""
    stats = log_store.get_log_stats(db, user.id, start=_as_utc(start), end=_as_utc(end))
    return {"success": True, "stats": stats}


@router.get("/{log_id}")
def get_log(
    log_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    log = log_store.get_log(db, user.id, log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Log not found")
    return {"success": True, "log": serialize_log(log)}


@router.put("/{log_id}")
def update_log(
    log_id: int,
    data: LogRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    log = log_store.update_log(db, user.id, log_id, data.to_store())
    if not log:
        raise HTTPException(status_code=404, detail="Log not found")
    return {"success": True, "log": serialize_log(log)}


@router.delete("/{log_id}")
def delete_log(
    log_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not log_store.delete_log(db, user.id, log_id):
        raise HTTPException(status_code=404, detail="Log not found")
    return {"success": True, "message": "Log deleted"}
