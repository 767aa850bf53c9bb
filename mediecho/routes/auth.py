import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from mediecho.auth import (
    authenticate_user,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_current_user,
    get_password_hash,
    set_token_cookie,
    verify_password,
)
from mediecho.auth.utils import TOKEN_COOKIE
from mediecho.config import Settings, get_settings
from mediecho.database import get_db
from mediecho.models import Log, User, WeeklyBrief
from mediecho.models.user import default_settings
from mediecho.schemas import (
    LoginRequest,
    PasswordChangeRequest,
    PreferencesRequest,
    RefreshRequest,
    RegisterRequest,
)
from mediecho.timeutils import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "subscription": {
            "plan": user.subscription_plan,
            "status": user.subscription_status,
            "end_date": user.subscription_end_date,
        },
        "settings": user.settings or default_settings(),
        "created_at": user.created_at,
        "last_login": user.last_login,
    }


def _token_response(user: User, settings: Settings, status_code: int = 200) -> JSONResponse:
    access_token = create_access_token(user.id, settings)
    body = {
        "success": True,
        "token": access_token,
        "refresh_token": create_refresh_token(user.id, settings),
        "user": serialize_user(user),
    }
    response = JSONResponse(content=jsonable_encoder(body), status_code=status_code)
    set_token_cookie(response, access_token, settings)
    return response


@router.post("/register")
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Create an account and sign it in."""
    email = data.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        email=email,
        password_hash=get_password_hash(data.password),
        name=(data.name or "").strip() or None,
        last_login=utc_now(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return _token_response(user, settings, status_code=201)


@router.post("/login")
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = authenticate_user(db, data.email, data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user.last_login = utc_now()
    db.commit()
    db.refresh(user)
    return _token_response(user, settings)


@router.post("/refresh")
def refresh(
    data: RefreshRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Exchange a refresh token for a new access token."""
    user_id = decode_refresh_token(data.refresh_token, settings)
    user = db.query(User).filter(User.id == user_id).first() if user_id else None
    if not user:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    access_token = create_access_token(user.id, settings)
    response = JSONResponse(content={"success": True, "token": access_token})
    set_token_cookie(response, access_token, settings)
    return response


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"success": True, "user": serialize_user(user)}


@router.put("/preferences")
def update_preferences(
    data: PreferencesRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # Reassign so the JSON column is flagged dirty
    merged = dict(user.settings or default_settings())
    merged.update(data.model_dump(exclude_none=True))
    user.settings = merged
    db.commit()
    db.refresh(user)
    return {"success": True, "settings": user.settings}


@router.put("/password")
def change_password(
    data: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not verify_password(data.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    user.password_hash = get_password_hash(data.new_password)
    db.commit()
    logger.info(f"Password changed for user {user.id}")
    return {"success": True, "message": "Password updated"}


@router.get("/export")
def export_data(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Download everything stored for the account, minus encrypted summaries."""
    logs = (
        db.query(Log)
        .filter(Log.user_id == user.id)
        .order_by(Log.created_at.asc(), Log.id.asc())
        .all()
    )
    briefs = (
        db.query(WeeklyBrief)
        .filter(WeeklyBrief.user_id == user.id)
        .order_by(WeeklyBrief.week_end.desc())
        .all()
    )
    body = {
        "exported_at": utc_now(),
        "user": serialize_user(user),
        "logs": [
            {
                "id": log.id,
                "type": log.type,
                "text": log.text,
                "tone": log.tone,
                "meta": log.meta or {},
                "created_at": log.created_at,
                "updated_at": log.updated_at,
            }
            for log in logs
        ],
        "briefs": [brief.to_metadata() for brief in briefs],
    }
    return JSONResponse(
        content=jsonable_encoder(body),
        headers={
            "Content-Disposition": 'attachment; filename="mediecho-export.json"'
        },
    )


@router.post("/logout")
def logout():
    response = Response(status_code=204)
    response.delete_cookie(TOKEN_COOKIE)
    return response
