from .storage import StorageEntry
from .inventory import (
    UnitConversion, Product, StockAdjustment, AdjustmentMode,
    ADJUSTMENT_REASONS, REASON_NEW_STOCK, REASON_DAMAGED, REASON_EXPIRED,
    REASON_STOCKTAKE, REASON_INTERNAL_USE, REASON_OTHER, UNSPECIFIED_REASON,
)
from .sales import CartItem, Transaction, PaymentMethod
from .tenancy import Actor, Branch, MotoristVisit, AppConfig

__all__ = [
    'StorageEntry',
    'UnitConversion', 'Product', 'StockAdjustment', 'AdjustmentMode',
    'ADJUSTMENT_REASONS', 'REASON_NEW_STOCK', 'REASON_DAMAGED', 'REASON_EXPIRED',
    'REASON_STOCKTAKE', 'REASON_INTERNAL_USE', 'REASON_OTHER', 'UNSPECIFIED_REASON',
    'CartItem', 'Transaction', 'PaymentMethod',
    'Actor', 'Branch', 'MotoristVisit', 'AppConfig',
]
