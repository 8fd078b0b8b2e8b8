"""Dashboard API routes - stats and videos for the caller's own channel"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vidtube.core.security import require_auth
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.schemas.common import api_response
from vidtube.services.dashboard_service import get_channel_stats, get_channel_videos

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/stats")
def channel_stats(user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return api_response(get_channel_stats(db, user), "Channel stats fetched successfully")


@router.get("/videos")
def channel_videos(
    page: int = Query(1),
    limit: int = Query(10),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_type: Optional[str] = Query(None, alias="sortType"),
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    result = get_channel_videos(db, user, page, limit, sort_by, sort_type)
    return api_response(result, "Channel videos fetched successfully")
