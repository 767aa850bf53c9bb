"""
Log Store

Owner-scoped data access for log entries. Every query filters on user_id so a
caller can never read or change another user's entries.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import sqlalchemy as sa
from sqlalchemy.orm import Session

from mediecho.models import Log


def _filtered(
    db: Session,
    user_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    log_type: Optional[str] = None,
):
    query = db.query(Log).filter(Log.user_id == user_id)
    if log_type:
        query = query.filter(Log.type == log_type)
    if start:
        query = query.filter(Log.created_at >= start)
    if end:
        query = query.filter(Log.created_at <= end)
    return query


def create_log(db: Session, user_id: int, data: Dict[str, Any]) -> Log:
    log = Log(
        user_id=user_id,
        type=data["type"],
        text=data["text"],
        tone=data.get("tone"),
        meta=data.get("meta"),
    )
    db.add(log)
    db.commit()
    db.refresh(log)
    return log


def get_log(db: Session, user_id: int, log_id: int) -> Optional[Log]:
    return db.query(Log).filter(Log.id == log_id, Log.user_id == user_id).first()


def list_logs(
    db: Session,
    user_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    log_type: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
) -> Tuple[List[Log], int]:
    """Page of logs, newest first, plus the total matching count."""
    query = _filtered(db, user_id, start, end, log_type)
    total = query.count()
    logs = (
        query.order_by(Log.created_at.desc(), Log.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return logs, total


def update_log(
    db: Session, user_id: int, log_id: int, data: Dict[str, Any]
) -> Optional[Log]:
    log = get_log(db, user_id, log_id)
    if not log:
        return None

    log.type = data["type"]
    log.text = data["text"]
    log.tone = data.get("tone")
    log.meta = data.get("meta")

    db.commit()
    db.refresh(log)
    return log


def delete_log(db: Session, user_id: int, log_id: int) -> bool:
    log = get_log(db, user_id, log_id)
    if not log:
        return False
    db.delete(log)
    db.commit()
    return True


def get_logs_in_window(
    db: Session, user_id: int, start: datetime, end: datetime
) -> List[Log]:
    """All logs with created_at in [start, end], oldest first."""
    return (
        _filtered(db, user_id, start, end)
        .order_by(Log.created_at.asc(), Log.id.asc())
        .all()
    )


def get_log_stats(
    db: Session,
    user_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Count and latest timestamp per log type."""
    query = db.query(
        Log.type,
        sa.func.count(Log.id),
        sa.func.max(Log.created_at),
    ).filter(Log.user_id == user_id)
    if start:
        query = query.filter(Log.created_at >= start)
    if end:
        query = query.filter(Log.created_at <= end)

    rows = query.group_by(Log.type).order_by(Log.type).all()
    return [
        {"type": log_type, "count": count, "latest": latest}
        for log_type, count, latest in rows
    ]
