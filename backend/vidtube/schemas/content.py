"""Pydantic schemas for comments, tweets and playlists

Fields are optional here so that blank/missing content is reported by the
services as a 400 with a readable message rather than a schema error.
"""
from typing import Optional

from pydantic import BaseModel


class ContentRequest(BaseModel):
    """Body for comment and tweet create/update"""
    content: Optional[str] = None


class PlaylistRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
