from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from mediecho.auth import get_current_user, require_brief_plan
from mediecho.config import Settings, get_settings
from mediecho.database import get_db
from mediecho.models import User
from mediecho.schemas import BriefGenerateRequest
from mediecho.services.brief_service import BriefService

router = APIRouter(prefix="/briefs", tags=["briefs"])


def get_brief_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> BriefService:
    return BriefService(db, settings)


@router.post("/generate", status_code=201)
def generate_brief(
    data: Optional[BriefGenerateRequest] = Body(default=None),
    user: User = Depends(require_brief_plan),
    service: BriefService = Depends(get_brief_service),
):
    """Generate the caller's brief for a week (the current one by default)."""
    data = data or BriefGenerateRequest()
    brief = service.generate(user, data.week_start_date, data.week_end_date)
    return {
        "success": True,
        "message": "Weekly brief generated successfully",
        "brief": brief.to_metadata(),
    }


@router.get("")
def list_briefs(
    user: User = Depends(get_current_user),
    service: BriefService = Depends(get_brief_service),
):
    briefs = service.list_briefs(user.id)
    return {"success": True, "briefs": [brief.to_metadata() for brief in briefs]}


@router.get("/{brief_id}")
def get_brief(
    brief_id: int,
    user: User = Depends(get_current_user),
    service: BriefService = Depends(get_brief_service),
):
    brief = service.get_brief(user.id, brief_id)
    return {"success": True, "brief": brief.to_metadata()}


@router.get("/{brief_id}/summary")
def get_brief_summary(
    brief_id: int,
    user: User = Depends(get_current_user),
    service: BriefService = Depends(get_brief_service),
):
    brief = service.get_brief(user.id, brief_id)
    return {
        "success": True,
        "brief": brief.to_metadata(),
        "summary": service.read_summary(brief),
    }


@router.get("/{brief_id}/download")
def download_brief(
    brief_id: int,
    user: User = Depends(require_brief_plan),
    service: BriefService = Depends(get_brief_service),
):
    brief, pdf_path = service.get_pdf_path(user.id, brief_id)
    return FileResponse(
        path=pdf_path,
        filename=brief.download_filename(service.settings.app_timezone),
        media_type="application/pdf",
    )


@router.delete("/{brief_id}")
def delete_brief(
    brief_id: int,
    user: User = Depends(get_current_user),
    service: BriefService = Depends(get_brief_service),
):
    service.delete_brief(user.id, brief_id)
    return {"success": True, "message": "Brief deleted"}
