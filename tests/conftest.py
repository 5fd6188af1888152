"""
Pytest configuration and fixtures for the catalog test suite.
"""

from decimal import Decimal

import pytest


@pytest.fixture(scope="session")
def django_db_setup(django_db_blocker):
    """Configure the test database and run migrations."""
    from django.core.management import call_command

    with django_db_blocker.unblock():
        call_command("migrate", "--run-syncdb", verbosity=0)


@pytest.fixture
def make_product(db):
    """Factory for Product rows."""
    from catalog.models import Product

    def _make(name, price="0.00", long_description="", brand=None, category=None, sku=""):
        return Product.objects.create(
            name=name,
            price=Decimal(price),
            long_description=long_description,
            brand=brand,
            category=category,
            sku=sku,
        )

    return _make


@pytest.fixture
def messy_catalog(db, make_product):
    """
    A small catalog with every kind of mess reconciliation cleans up.

    - "NOW" is a non-canonical brand spelling
    - "Paging Brand" and the oversized category are junk labels
    - Two products are the same item under different spellings
    - "Mystery Widget" matches no rule and has no category
    """
    from catalog.models import Brand, Category

    now_short = Brand.objects.create(name="NOW")
    paging = Brand.objects.create(name="Paging Brand")
    now_foods = Brand.objects.create(name="Now Foods")
    vitamins = Category.objects.create(name="Vitamins")
    junk_category = Category.objects.create(name="A Very Long Category Name That Is Junk")

    cheap = make_product(
        "Now Foods Vitamin C 1000mg",
        price="0.00",
        brand=now_short,
        category=junk_category,
    )
    priced = make_product(
        "NOW FOODS vitamin-c 1000mg",
        price="19.99",
        brand=now_foods,
        category=vitamins,
    )
    mystery = make_product("Mystery Widget", price="5.00", brand=paging)

    return {
        "brands": {"now_short": now_short, "paging": paging, "now_foods": now_foods},
        "categories": {"vitamins": vitamins, "junk": junk_category},
        "products": {"cheap": cheap, "priced": priced, "mystery": mystery},
    }
