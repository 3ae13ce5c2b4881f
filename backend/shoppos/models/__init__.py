from .inventory import Product
from .sales import Sale, SaleItem, DEFAULT_PAYMENT_METHOD, PAYMENT_METHODS
from .auth import User, SessionToken, ROLE_ADMIN, ROLE_CASHIER, ROLES

__all__ = [
    'Product',
    'Sale', 'SaleItem', 'DEFAULT_PAYMENT_METHOD', 'PAYMENT_METHODS',
    'User', 'SessionToken', 'ROLE_ADMIN', 'ROLE_CASHIER', 'ROLES',
]
