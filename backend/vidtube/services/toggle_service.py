"""Toggle primitive shared by likes and subscriptions

An edge row existing means "on". Toggling deletes it if present and creates it
otherwise. The lookup and the write are not serialized; if a concurrent
toggle creates the same edge first, the unique constraint rejects our insert
and the edge is reported as active.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidtube.core.metrics import toggles_counter

logger = logging.getLogger(__name__)


@dataclass
class ToggleResult:
    active: bool
    edge: Optional[Any] = None  # The created row; None when removed or created concurrently


def find_edge(db: Session, model: Type, selector: dict):
    return db.query(model).filter_by(**selector).first()


def toggle_edge(db: Session, model: Type, kind: str, **selector) -> ToggleResult:
    """Create-or-remove the edge matching selector

    Args:
        model: Edge model (Like, Subscription)
        kind: Metric label, e.g. "video_like", "subscription"
        selector: Column values identifying the (actor, target) pair
    """
    existing = find_edge(db, model, selector)

    if existing is not None:
        db.delete(existing)
        db.commit()
        toggles_counter.labels(kind=kind, action="removed").inc()
        logger.debug(f"Toggle {kind} off: {selector}")
        return ToggleResult(active=False)

    edge = model(**selector)
    db.add(edge)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        toggles_counter.labels(kind=kind, action="duplicate").inc()
        logger.info(f"Toggle {kind} raced with a concurrent create, edge already active: {selector}")
        return ToggleResult(active=True)

    db.refresh(edge)
    toggles_counter.labels(kind=kind, action="created").inc()
    logger.debug(f"Toggle {kind} on: {selector}")
    return ToggleResult(active=True, edge=edge)
