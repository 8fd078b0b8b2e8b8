"""Tweets API routes"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidtube.core.security import require_auth
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.schemas.common import api_response
from vidtube.schemas.content import ContentRequest
from vidtube.schemas.responses import build_tweet_response
from vidtube.services.tweet_service import create_tweet, delete_tweet, get_user_tweets, update_tweet

router = APIRouter(prefix="/api/v1/tweets", tags=["tweets"])


@router.post("")
def create_a_tweet(request_data: ContentRequest, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    tweet = create_tweet(db, user, request_data.content)
    return api_response(build_tweet_response(tweet), "Tweet created successfully", status_code=201)


@router.get("/user/{user_id}")
def user_tweets(user_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return api_response(get_user_tweets(db, user_id), "Tweets fetched successfully")


@router.patch("/{tweet_id}")
def update_a_tweet(
    tweet_id: str,
    request_data: ContentRequest,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    tweet = update_tweet(db, user, tweet_id, request_data.content)
    return api_response(build_tweet_response(tweet), "Tweet updated successfully")


@router.delete("/{tweet_id}")
def delete_a_tweet(tweet_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    delete_tweet(db, user, tweet_id)
    return api_response({}, "Tweet deleted successfully")
