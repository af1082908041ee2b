"""Menu item model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Float, Boolean, DateTime, Text, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID

from campus_dining.database import Base


class MenuItem(Base):
    """Menu items"""
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_menu_items_price_non_negative"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text)
    price = Column(Float, nullable=False)
    category = Column(String(100), nullable=False)  # Mains, Sides, Drinks, Desserts, etc.
    available = Column(Boolean, nullable=False, default=True)
    image = Column(String(500), nullable=False, default="")  # Path served by the static host
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
