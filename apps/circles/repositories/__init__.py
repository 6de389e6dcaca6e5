from .base import CircleRepository
from .django_orm import DjangoCircleRepository

__all__ = [
    'CircleRepository',
    'DjangoCircleRepository',
]
