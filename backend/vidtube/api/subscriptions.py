"""Subscriptions API routes"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidtube.core.security import require_auth
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.schemas.common import api_response
from vidtube.services.subscription_service import (
    get_channel_subscribers, get_subscribed_channels, toggle_subscription
)

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


@router.post("/c/{channel_id}")
def toggle_channel_subscription(channel_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    result = toggle_subscription(db, user, channel_id)
    message = "Subscribed successfully" if result["isSubscribed"] else "Unsubscribed successfully"
    return api_response(result, message)


@router.get("/c/{channel_id}")
def channel_subscribers(channel_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return api_response(get_channel_subscribers(db, channel_id), "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}")
def subscribed_channels(subscriber_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return api_response(get_subscribed_channels(db, subscriber_id), "Subscribed channels fetched successfully")
