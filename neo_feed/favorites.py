"""Per-user favorites, stored as snapshots of normalized objects."""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models
from .schemas import NearEarthObject

logger = logging.getLogger(__name__)


def build_snapshot(user_id: str, neo: NearEarthObject) -> dict:
    nearest = neo.nearest_approach
    return {
        "user_id": user_id,
        "neo_id": neo.id,
        "name": neo.name,
        "hazardous": neo.hazardous,
        "nearest_approach": nearest.datetime if nearest else None,
        "avg_diameter_km": neo.avg_diameter_km,
    }


def _lookup(db: Session, user_id: str, neo_id: str):
    return db.query(models.Favorite).filter_by(user_id=user_id, neo_id=neo_id).first()


def _apply(fav: models.Favorite, snapshot: dict) -> None:
    for key, value in snapshot.items():
        setattr(fav, key, value)


def add_favorite(db: Session, user_id: str, neo: NearEarthObject) -> models.Favorite:
    """Insert or refresh the snapshot for ``neo`` in ``user_id``'s favorites."""

    snapshot = build_snapshot(user_id, neo)
    fav = _lookup(db, user_id, neo.id)
    if fav is None:
        fav = models.Favorite(**snapshot)
        db.add(fav)
        try:
            db.commit()
        except IntegrityError:
            # a concurrent add inserted the same (user_id, neo_id) first
            db.rollback()
            fav = _lookup(db, user_id, neo.id)
            _apply(fav, snapshot)
            db.commit()
    else:
        _apply(fav, snapshot)
        db.commit()
    db.refresh(fav)
    logger.info("User %s favorited %s", user_id, neo.id)
    return fav


def remove_favorite(db: Session, user_id: str, neo_id: str) -> bool:
    fav = _lookup(db, user_id, neo_id)
    if fav is None:
        return False
    db.delete(fav)
    db.commit()
    logger.info("User %s removed favorite %s", user_id, neo_id)
    return True


def list_favorites(db: Session, user_id: str) -> List[models.Favorite]:
    return (
        db.query(models.Favorite)
        .filter_by(user_id=user_id)
        .order_by(models.Favorite.created_at, models.Favorite.id)
        .all()
    )


def is_favorite(db: Session, user_id: str, neo_id: str) -> bool:
    return _lookup(db, user_id, neo_id) is not None
