"""Channel subscriptions"""
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session, joinedload

from vidtube.core.errors import ValidationError
from vidtube.core.permissions import get_or_404
from vidtube.models.subscription import Subscription
from vidtube.models.user import User
from vidtube.schemas.responses import build_owner_summary
from vidtube.services.toggle_service import toggle_edge
from vidtube.utils.ids import ensure_valid_id

logger = logging.getLogger(__name__)


def toggle_subscription(db: Session, actor: User, raw_channel_id: str) -> Dict[str, Any]:
    """Subscribe to or unsubscribe from a channel

    Raises:
        ValidationError: Malformed channel id, or actor subscribing to themselves
        NotFoundError: Channel does not exist
    """
    channel_id = ensure_valid_id(raw_channel_id, "channel")
    if channel_id == actor.id:
        raise ValidationError("You cannot subscribe to your own channel!")

    channel = get_or_404(db, User, channel_id, "channel")
    result = toggle_edge(db, Subscription, "subscription", subscriber_id=actor.id, channel_id=channel.id)
    return {"isSubscribed": result.active}


def get_channel_subscribers(db: Session, raw_channel_id: str) -> List[Dict[str, Any]]:
    channel = get_or_404(db, User, raw_channel_id, "channel")
    rows = (
        db.query(Subscription)
        .options(joinedload(Subscription.subscriber))
        .filter(Subscription.channel_id == channel.id)
        .order_by(Subscription.created_at.desc())
        .all()
    )
    return [
        {"subscriber": build_owner_summary(row.subscriber), "subscribedAt": row.created_at.isoformat()}
        for row in rows
    ]


def get_subscribed_channels(db: Session, raw_subscriber_id: str) -> List[Dict[str, Any]]:
    subscriber = get_or_404(db, User, raw_subscriber_id, "subscriber")
    rows = (
        db.query(Subscription)
        .options(joinedload(Subscription.channel))
        .filter(Subscription.subscriber_id == subscriber.id)
        .order_by(Subscription.created_at.desc())
        .all()
    )
    return [
        {"channel": build_owner_summary(row.channel), "subscribedAt": row.created_at.isoformat()}
        for row in rows
    ]
