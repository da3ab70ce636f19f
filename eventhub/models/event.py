from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from eventhub.models import Base
from eventhub.models.participation import ParticipationStatus


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(5000), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    date = Column(DateTime, nullable=False)
    time = Column(String(50), nullable=True)
    period = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    participants_number = Column(Integer, nullable=True)
    coordinates = Column(JSON, nullable=False, default=list)
    status = Column(Boolean, nullable=True)
    warnings = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    owner = relationship("User", back_populates="events")
    participations = relationship(
        "Participation",
        back_populates="event",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def members(self, status: ParticipationStatus) -> list[int]:
        return [p.user_id for p in self.participations if p.status == status]

    @property
    def participants(self) -> list[int]:
        return self.members(ParticipationStatus.approved)

    @property
    def waiting_list(self) -> list[int]:
        return self.members(ParticipationStatus.waiting)

    def is_full(self) -> bool:
        if self.participants_number is None:
            return False
        return len(self.participants) >= self.participants_number
