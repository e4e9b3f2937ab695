import threading

from protean.exceptions import ObjectNotFoundError

from ordering.customers.port import Customer, CustomerStore, SavedAddress


class MemoryCustomerStore(CustomerStore):
    def __init__(self, customers=()) -> None:
        self._lock = threading.Lock()
        self._customers: dict[str, Customer] = {}
        for customer in customers:
            self.add(customer)

    def add(self, customer: Customer) -> Customer:
        with self._lock:
            self._customers[customer.customer_id] = customer.model_copy(deep=True)
        return customer

    def get(self, customer_id: str) -> Customer:
        with self._lock:
            customer = self._customers.get(customer_id)
        if customer is None:
            raise ObjectNotFoundError({"customer_id": [f"Customer {customer_id} not found"]})
        return customer.model_copy(deep=True)

    def record_checkout_address(self, customer_id: str, address: SavedAddress) -> Customer:
        with self._lock:
            customer = self._customers.get(customer_id)
            if customer is None:
                raise ObjectNotFoundError({"customer_id": [f"Customer {customer_id} not found"]})
            addresses = list(customer.addresses)
            if address not in addresses:
                addresses.append(address)
            updated = customer.model_copy(
                update={"phone": address.phone, "default_address": address, "addresses": addresses}
            )
            self._customers[customer_id] = updated
        return updated.model_copy(deep=True)
