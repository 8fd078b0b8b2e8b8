"""Playlist service - owner-managed ordered collections of videos"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from vidtube.core.errors import ValidationError
from vidtube.core.permissions import get_or_404, get_owned_resource
from vidtube.models.playlist import Playlist, PlaylistVideo
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.schemas.responses import build_playlist_response

logger = logging.getLogger(__name__)


def _require_fields(name: Optional[str], description: Optional[str]):
    if not (name or "").strip() or not (description or "").strip():
        raise ValidationError("Name and description are required!")
    return name.strip(), description.strip()


def create_playlist(db: Session, actor: User, name: Optional[str], description: Optional[str]) -> Playlist:
    name, description = _require_fields(name, description)
    playlist = Playlist(name=name, description=description, owner_id=actor.id)
    db.add(playlist)
    db.commit()
    db.refresh(playlist)
    return playlist


def get_user_playlists(db: Session, raw_user_id: str) -> List[Dict[str, Any]]:
    user = get_or_404(db, User, raw_user_id, "user")
    playlists = (
        db.query(Playlist)
        .filter(Playlist.owner_id == user.id)
        .order_by(Playlist.created_at.desc())
        .all()
    )
    return [build_playlist_response(p) for p in playlists]


def get_playlist(db: Session, raw_playlist_id: str) -> Playlist:
    return get_or_404(db, Playlist, raw_playlist_id, "playlist")


def update_playlist(db: Session, actor: User, raw_playlist_id: str,
                    name: Optional[str], description: Optional[str]) -> Playlist:
    playlist = get_owned_resource(db, Playlist, raw_playlist_id, actor.id, "playlist", action="update")
    playlist.name, playlist.description = _require_fields(name, description)
    db.commit()
    db.refresh(playlist)
    return playlist


def delete_playlist(db: Session, actor: User, raw_playlist_id: str) -> None:
    playlist = get_owned_resource(db, Playlist, raw_playlist_id, actor.id, "playlist", action="delete")
    db.delete(playlist)
    db.commit()
    logger.info(f"User {actor.id} deleted playlist {playlist.id}")


def add_video_to_playlist(db: Session, actor: User, raw_video_id: str, raw_playlist_id: str) -> Playlist:
    """Append a video; adding one that is already present is rejected"""
    playlist = get_owned_resource(db, Playlist, raw_playlist_id, actor.id, "playlist", action="update")
    video = get_or_404(db, Video, raw_video_id, "video")

    if any(entry.video_id == video.id for entry in playlist.entries):
        raise ValidationError("Video is already in the playlist!")

    playlist.entries.append(PlaylistVideo(video_id=video.id))
    db.commit()
    db.refresh(playlist)
    return playlist


def remove_video_from_playlist(db: Session, actor: User, raw_video_id: str, raw_playlist_id: str) -> Playlist:
    playlist = get_owned_resource(db, Playlist, raw_playlist_id, actor.id, "playlist", action="update")
    video = get_or_404(db, Video, raw_video_id, "video")

    entry = next((e for e in playlist.entries if e.video_id == video.id), None)
    if entry is None:
        raise ValidationError("Video is not in the playlist!")

    playlist.entries.remove(entry)
    db.commit()
    db.refresh(playlist)
    return playlist
