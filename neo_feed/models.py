from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, UniqueConstraint
from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Favorite(Base):
    __tablename__ = "neo_favorites"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    neo_id = Column(String, nullable=False)
    name = Column(String)
    hazardous = Column(Boolean)
    nearest_approach = Column(String)
    avg_diameter_km = Column(Float)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "neo_id", name="uq_favorite_user_neo"),
    )

    def __repr__(self) -> str:
        return f"<Favorite {self.user_id} {self.neo_id}>"
