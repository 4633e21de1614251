from .auth import User
from .inventory import InventoryRecord, REFILL_STATUSES

__all__ = [
    'User',
    'InventoryRecord', 'REFILL_STATUSES',
]
