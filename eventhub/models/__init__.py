from sqlalchemy.orm import declarative_base

Base = declarative_base()

from eventhub.models.user import User  # noqa: E402,F401
from eventhub.models.category import Category  # noqa: E402,F401
from eventhub.models.event import Event  # noqa: E402,F401
from eventhub.models.participation import Participation, ParticipationStatus  # noqa: E402,F401
