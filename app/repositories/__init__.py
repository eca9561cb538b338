"""
app/repositories package marker.
"""

from app.repositories.batch_repository import BatchRepository
from app.repositories.customer_repository import CustomerRepository
from app.repositories.order_repository import OrderRepository, format_order_number
from app.repositories.sync_repositories import SyncRepositories, build_sync_repositories

__all__ = [
    "BatchRepository",
    "CustomerRepository",
    "OrderRepository",
    "SyncRepositories",
    "build_sync_repositories",
    "format_order_number",
]
