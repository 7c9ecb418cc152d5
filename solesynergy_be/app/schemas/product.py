from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class CategoryRef(BaseModel):
    id: int
    name: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


def _unique_labels(values: List[str]) -> List[str]:
    cleaned = [str(v).strip() for v in values]
    if any(not v for v in cleaned):
        raise ValueError("labels must be non-empty")
    if len(set(cleaned)) != len(cleaned):
        raise ValueError("labels must be unique")
    return cleaned


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    originalPrice: Optional[float] = Field(default=None, ge=0)
    description: str
    images: List[str] = Field(min_length=1)
    sizes: List[str] = Field(min_length=1)
    colors: List[str] = Field(min_length=1)
    category: int
    featured: bool = False
    bestseller: bool = False
    new: bool = False
    rating: float = 0.0
    reviews: int = 0

    @field_validator("sizes", "colors")
    @classmethod
    def labels_unique(cls, v: List[str]) -> List[str]:
        return _unique_labels(v)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    # Partial update: omitted fields keep their current value
    name: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    originalPrice: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    images: Optional[List[str]] = None
    sizes: Optional[List[str]] = Field(default=None, min_length=1)
    colors: Optional[List[str]] = Field(default=None, min_length=1)
    category: Optional[int] = None
    featured: Optional[bool] = None
    bestseller: Optional[bool] = None
    new: Optional[bool] = None
    rating: Optional[float] = None
    reviews: Optional[int] = None

    @field_validator("sizes", "colors")
    @classmethod
    def labels_unique(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _unique_labels(v) if v is not None else v


class ProductOut(BaseModel):
    id: int
    name: str
    price: float
    originalPrice: Optional[float] = None
    description: str
    images: List[str]
    sizes: List[str]
    colors: List[str]
    category: Optional[CategoryRef] = None
    featured: bool = False
    bestseller: bool = False
    new: bool = False
    rating: float = 0.0
    reviews: int = 0
