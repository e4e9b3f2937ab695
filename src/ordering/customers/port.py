"""Customer record store consumed at checkout.

Checkout reads a customer's contact details for the order snapshot and, once
the order is saved, writes the delivery address back to the customer's
address book.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field


class SavedAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_name: str
    phone: str
    address_line: str
    city: str
    postal_code: str


class Customer(BaseModel):
    customer_id: str = Field(min_length=1)
    name: str = ""
    email: str = ""
    phone: str = ""
    default_address: SavedAddress | None = None
    addresses: list[SavedAddress] = Field(default_factory=list)


class CustomerStore(ABC):
    @abstractmethod
    def get(self, customer_id: str) -> Customer:
        """Return the customer or raise ObjectNotFoundError."""
        ...

    @abstractmethod
    def record_checkout_address(self, customer_id: str, address: SavedAddress) -> Customer:
        """Make ``address`` the customer's default and remember it.

        The phone on the address becomes the customer's phone. An address
        already in the address book is not added twice.
        """
        ...
