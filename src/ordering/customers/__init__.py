"""Customer store used at checkout.

get_customer_store() returns the active store, an in-memory one unless
set_customer_store() installed another.
"""

from ordering.customers.memory_adapter import MemoryCustomerStore
from ordering.customers.port import Customer, CustomerStore, SavedAddress

__all__ = [
    "Customer",
    "CustomerStore",
    "SavedAddress",
    "get_customer_store",
    "reset_customer_store",
    "set_customer_store",
]

_current_store: CustomerStore | None = None


def get_customer_store() -> CustomerStore:
    global _current_store
    if _current_store is None:
        _current_store = MemoryCustomerStore()
    return _current_store


def set_customer_store(store: CustomerStore) -> None:
    global _current_store
    _current_store = store


def reset_customer_store() -> None:
    global _current_store
    _current_store = None
