"""Category and map style listings."""
from pydantic import BaseModel


class CategoryResponse(BaseModel):
    id: str
    name: str
    icon: str
    color: str


class MapStyleResponse(BaseModel):
    id: str
    name: str
    icon: str
    default: bool = False
