import threading

from ordering.catalog.port import Product, ProductCatalog


class MemoryProductCatalog(ProductCatalog):
    def __init__(self, products=()) -> None:
        self._lock = threading.Lock()
        self._products: dict[str, Product] = {}
        for product in products:
            self.add(product)

    def add(self, product: Product) -> Product:
        with self._lock:
            self._products[product.product_id] = product
        return product

    def find(self, product_id: str) -> Product | None:
        with self._lock:
            return self._products.get(product_id)
