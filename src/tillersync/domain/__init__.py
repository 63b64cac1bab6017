"""Domain layer for tillersync."""

from tillersync.domain.transaction import TransactionService
from tillersync.domain.category import CategoryService
from tillersync.domain.autocat import AutoCatService

__all__ = [
    "TransactionService",
    "CategoryService",
    "AutoCatService",
]
