from pydantic import Field

from eventhub.schemas import CamelModel

class CategorySchema(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)

class CategoryUpdateSchema(CamelModel):
    id: int
    name: str = Field(..., min_length=1, max_length=50)

class CategoryIdSchema(CamelModel):
    id: int

class CategoryResponseSchema(CamelModel):
    id: int
    name: str
