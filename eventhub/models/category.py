from eventhub.models import Base
from sqlalchemy import Column, Integer, String

CATEGORY_NAMES = (
    "concert",
    "sport",
    "plein air",
    "cinéma",
    "théatre",
    "expo",
    "nautique",
    "shopping",
    "jeux de société",
    "foire et salons",
)


class Category(Base):
    __tablename__ = "category"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
