import pytest
from io import BytesIO

from apps.catalog.models import Brand, Category
from apps.catalog.services import build_products_workbook


@pytest.fixture
def category(business):
    return Category.objects.create(business=business, name='Electronics')


@pytest.fixture
def brand(business):
    return Brand.objects.create(business=business, name='Nasco')


@pytest.fixture
def edited_catalog(business):
    """
    Return a function that exports the catalog, applies ``edit(sheet)`` to
    the Products sheet, and hands back the saved workbook as a file.
    """
    def build(edit):
        workbook = build_products_workbook(business)
        edit(workbook['Products'])
        buffer = BytesIO()
        workbook.save(buffer)
        buffer.seek(0)
        buffer.name = 'products.xlsx'
        return buffer
    return build
