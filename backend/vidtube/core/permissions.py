"""Ownership guard for videos, comments, tweets and playlists

Every mutation of an owned resource goes through ``get_owned_resource``:
validate the id (400), load the row (404), then compare owners (403). There
are no per-kind exceptions to this order.
"""
import logging
from typing import Type, TypeVar

from sqlalchemy.orm import Session

from vidtube.core.errors import AuthorizationError, NotFoundError
from vidtube.models.base import Base
from vidtube.utils.ids import ensure_valid_id

security_logger = logging.getLogger("security")

ModelT = TypeVar("ModelT", bound=Base)


def assert_owner(resource, actor_id: str, action: str = "modify", label: str = "resource") -> None:
    """Raise AuthorizationError unless actor_id owns resource"""
    if str(resource.owner_id) != str(actor_id):
        security_logger.warning(
            f"Ownership check failed - {label} {resource.id} owned by {resource.owner_id}, actor {actor_id}"
        )
        raise AuthorizationError(f"You don't have permission to {action} this {label}!")


def get_or_404(db: Session, model: Type[ModelT], raw_id: str, label: str) -> ModelT:
    """Validate the id format, then load the row or raise NotFoundError"""
    resource_id = ensure_valid_id(raw_id, label)
    resource = db.query(model).filter(model.id == resource_id).first()
    if resource is None:
        raise NotFoundError(f"{label.capitalize()} not found!")
    return resource


def get_owned_resource(db: Session, model: Type[ModelT], raw_id: str, actor_id: str,
                       label: str, action: str = "modify") -> ModelT:
    """Load a resource the actor is about to mutate, enforcing existence before ownership"""
    resource = get_or_404(db, model, raw_id, label)
    assert_owner(resource, actor_id, action=action, label=label)
    return resource
