"""Playlists API routes"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidtube.core.security import require_auth
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.schemas.common import api_response
from vidtube.schemas.content import PlaylistRequest
from vidtube.schemas.responses import build_playlist_response
from vidtube.services.playlist_service import (
    add_video_to_playlist, create_playlist, delete_playlist, get_playlist,
    get_user_playlists, remove_video_from_playlist, update_playlist
)

router = APIRouter(prefix="/api/v1/playlists", tags=["playlists"])


@router.post("")
def create_a_playlist(request_data: PlaylistRequest, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    playlist = create_playlist(db, user, request_data.name, request_data.description)
    return api_response(build_playlist_response(playlist), "Playlist created successfully", status_code=201)


@router.get("/user/{user_id}")
def user_playlists(user_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return api_response(get_user_playlists(db, user_id), "Playlists fetched successfully")


@router.get("/{playlist_id}")
def get_playlist_by_id(playlist_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return api_response(build_playlist_response(get_playlist(db, playlist_id)), "Playlist fetched successfully")


@router.patch("/{playlist_id}")
def update_a_playlist(
    playlist_id: str,
    request_data: PlaylistRequest,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    playlist = update_playlist(db, user, playlist_id, request_data.name, request_data.description)
    return api_response(build_playlist_response(playlist), "Playlist updated successfully")


@router.delete("/{playlist_id}")
def delete_a_playlist(playlist_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    delete_playlist(db, user, playlist_id)
    return api_response({}, "Playlist deleted successfully")


@router.patch("/add/{video_id}/{playlist_id}")
def add_video(video_id: str, playlist_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    playlist = add_video_to_playlist(db, user, video_id, playlist_id)
    return api_response(build_playlist_response(playlist), "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}")
def remove_video(video_id: str, playlist_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    playlist = remove_video_from_playlist(db, user, video_id, playlist_id)
    return api_response(build_playlist_response(playlist), "Video removed from playlist successfully")
