from typing import List, Optional

from schemas import Product

# Fixed café menu, prices in the house currency
PRODUCTS: List[Product] = [
    Product(id="1", name="Espresso Simple", description="A short, strong shot of pure coffee.", price=2.50),
    Product(id="2", name="Latte Vainilla", description="Steamed milk with vanilla syrup.", price=4.50),
    Product(id="3", name="Cappuccino", description="Espresso topped with milk foam.", price=4.00),
    Product(id="4", name="Americano", description="Espresso lengthened with hot water.", price=3.00),
    Product(id="5", name="Mocha", description="Espresso with chocolate and milk.", price=5.00),
]

_BY_ID = {p.id: p for p in PRODUCTS}


def get_product(product_id: str) -> Optional[Product]:
    return _BY_ID.get(product_id)
