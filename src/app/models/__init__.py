"""ORM models package -- re-exports all models and the Base class."""

from app.models.base import Base
from app.models.product import Product

__all__ = [
    "Base",
    "Product",
]
