"""
Sample outdoor catalog loaded into an empty database.
"""

from decimal import Decimal

from .catalog import SqliteCatalog

SAMPLE_PRODUCTS = [
    ("Solar Powered Flashlight", "A fantastic product for outdoor enthusiasts", Decimal("19.99"), "product1.png"),
    ("Hiking Poles", "Ideal for camping and hiking trips", Decimal("24.99"), "product2.png"),
    ("Outdoor Rain Jacket", "This product will keep you warm and dry in all weathers", Decimal("49.99"), "product3.png"),
    ("Survival Kit", "A must-have for any outdoor adventurer", Decimal("99.99"), "product4.png"),
    ("Outdoor Backpack", "This backpack is perfect for carrying all your outdoor essentials", Decimal("39.99"), "product5.png"),
    ("Camping Cookware", "This cookware set is ideal for cooking outdoors", Decimal("29.99"), "product6.png"),
    ("Camping Stove", "This stove is perfect for cooking outdoors", Decimal("49.99"), "product7.png"),
    ("Camping Lantern", "This lantern is perfect for lighting up your campsite", Decimal("19.99"), "product8.png"),
    ("Camping Tent", "This tent is perfect for camping trips", Decimal("99.99"), "product9.png"),
    ("Trail Tent", "2-person lightweight tent", Decimal("129.99"), "product10.png"),
]


def seed_catalog(catalog: SqliteCatalog) -> int:
    """Insert the sample products into an empty catalog. Returns the number inserted."""
    if catalog.count_items() > 0:
        return 0

    for name, description, price, image_url in SAMPLE_PRODUCTS:
        catalog.add_item(name, description, price, image_url)
    return len(SAMPLE_PRODUCTS)
