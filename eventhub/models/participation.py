from eventhub.models import Base
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Enum, DateTime, ForeignKey, UniqueConstraint
import enum


class ParticipationStatus(str, enum.Enum):
    waiting = "waiting"
    approved = "approved"


class Participation(Base):
    __tablename__ = "participations"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    joined_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    status = Column(Enum(ParticipationStatus), nullable=False, default=ParticipationStatus.waiting)

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="unique_user_event"),
    )

    user = relationship("User", back_populates="participations")
    event = relationship("Event", back_populates="participations")
