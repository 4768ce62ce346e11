# posledger/model/product.py
from dataclasses import dataclass
from decimal import Decimal
from typing import List


@dataclass(frozen=True)
class Product:
    name: str
    price: Decimal
    description: str

    def as_api(self):
        return {
            "name": self.name,
            "price": float(self.price),
            "description": self.description,
        }


CATALOG: List[Product] = [
    # Apparel
    Product("Classic T-Shirt", Decimal("14.99"), "100% cotton unisex tee"),
    Product("Slim Fit Jeans", Decimal("39.99"), "Denim with stretch comfort"),
    Product("Hoodie", Decimal("29.99"), "Fleece-lined pullover hoodie"),
    Product("Lightweight Jacket", Decimal("49.99"), "Windbreaker for everyday wear"),
    Product("Sneakers", Decimal("59.99"), "Breathable everyday sneakers"),
    # Accessories
    Product("Backpack", Decimal("34.99"), "Water-resistant daypack, 20L"),
    Product("Water Bottle", Decimal("12.99"), "Insulated stainless steel, 600ml"),
    Product("Sunglasses", Decimal("19.99"), "UV400 polarized lenses"),
    Product("Cap", Decimal("11.99"), "Adjustable cotton baseball cap"),
    Product("Wallet", Decimal("17.49"), "Slim RFID-blocking wallet"),
    # Tech & peripherals
    Product("Wireless Earbuds", Decimal("49.99"), "Bluetooth 5.3 with charging case"),
    Product("Phone Charger", Decimal("9.99"), "20W USB-C fast charger"),
    Product("USB-C Cable", Decimal("6.99"), "1m braided fast-charge cable"),
    Product("Smartphone Case", Decimal("15.99"), "Shock-absorbing protective case"),
    Product("Wireless Mouse", Decimal("18.99"), "Silent click ergonomic mouse"),
    # Stationery
    Product("Notebook", Decimal("7.49"), "A5 dotted journal, 120 pages"),
    Product("Pen Set", Decimal("5.99"), "Pack of 5 gel pens, 0.5mm"),
]
