"""Product lookup consumed by pricing.

The catalog itself is administered elsewhere; ordering only reads a product's
price, currency and active flag.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str = Field(min_length=1)
    name: str = ""
    price: float = Field(ge=0)
    currency: str = Field(default="INR", min_length=3, max_length=3)
    active: bool = True


class ProductCatalog(ABC):
    @abstractmethod
    def find(self, product_id: str) -> Product | None:
        """Return the product, or None when it does not exist."""
        ...

    def find_many(self, product_ids) -> dict[str, Product]:
        found = {}
        for product_id in dict.fromkeys(product_ids):
            product = self.find(product_id)
            if product is not None:
                found[product_id] = product
        return found
