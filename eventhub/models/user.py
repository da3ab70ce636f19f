from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, JSON
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from eventhub.models import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(20), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    birthdate = Column(Date, nullable=True)
    description = Column(String(1000), nullable=True)
    location = Column(String(255), nullable=True)
    interests = Column(JSON, nullable=False, default=list)
    warnings = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    avatar = Column(String(255), nullable=False, default="monavatar.png")
    banner = Column(String(255), nullable=False, default="mabanner.png")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    events = relationship("Event", back_populates="owner", cascade="all, delete-orphan")
    participations = relationship("Participation", back_populates="user", cascade="all, delete-orphan")
