"""Tweet service"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from vidtube.core.errors import ValidationError
from vidtube.core.permissions import get_or_404, get_owned_resource
from vidtube.models.tweet import Tweet
from vidtube.models.user import User
from vidtube.schemas.responses import build_tweet_response


def _require_content(content: Optional[str]) -> str:
    if not (content or "").strip():
        raise ValidationError("Tweet content is required!")
    return content.strip()


def create_tweet(db: Session, actor: User, content: Optional[str]) -> Tweet:
    tweet = Tweet(content=_require_content(content), owner_id=actor.id)
    db.add(tweet)
    db.commit()
    db.refresh(tweet)
    return tweet


def get_user_tweets(db: Session, raw_user_id: str) -> List[Dict[str, Any]]:
    user = get_or_404(db, User, raw_user_id, "user")
    tweets = (
        db.query(Tweet)
        .options(joinedload(Tweet.owner))
        .filter(Tweet.owner_id == user.id)
        .order_by(Tweet.created_at.desc())
        .all()
    )
    return [build_tweet_response(t) for t in tweets]


def update_tweet(db: Session, actor: User, raw_tweet_id: str, content: Optional[str]) -> Tweet:
    tweet = get_owned_resource(db, Tweet, raw_tweet_id, actor.id, "tweet", action="update")
    tweet.content = _require_content(content)
    db.commit()
    db.refresh(tweet)
    return tweet


def delete_tweet(db: Session, actor: User, raw_tweet_id: str) -> None:
    """Owner-only; likes on the tweet are removed with it"""
    tweet = get_owned_resource(db, Tweet, raw_tweet_id, actor.id, "tweet", action="delete")
    db.delete(tweet)
    db.commit()
