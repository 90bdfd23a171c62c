from .inventory import Product
from .sales import Sale
from .auth import User

__all__ = [
    'Product',
    'Sale',
    'User',
]
