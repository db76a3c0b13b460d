from .catalog import Product
from .ledger import Client, Sale, StoreDebt
from .collections import StoredCollection

__all__ = [
    'Product',
    'Client', 'Sale', 'StoreDebt',
    'StoredCollection',
]
