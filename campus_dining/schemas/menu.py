"""Menu schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import Field

from campus_dining.schemas.base import CamelModel


class MenuItemCreate(CamelModel):
    """Create menu item request"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    available: bool = True
    image: str = ""


class MenuItemUpdate(CamelModel):
    """Update menu item request"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    available: Optional[bool] = None
    image: Optional[str] = None


class MenuItemResponse(CamelModel):
    """Menu item response"""
    id: UUID
    name: str
    description: Optional[str]
    price: float
    category: str
    available: bool
    image: str
    created_at: datetime
    updated_at: datetime
