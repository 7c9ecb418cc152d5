from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CategoryIn(BaseModel):
    name: str = Field(min_length=1)
    image: str
    slug: str = Field(min_length=1, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    image: Optional[str] = None
    slug: Optional[str] = Field(default=None, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class CategoryOut(BaseModel):
    id: int
    name: str
    image: str
    slug: str

    model_config = ConfigDict(from_attributes=True)
