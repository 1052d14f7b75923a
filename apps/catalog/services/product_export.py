"""
Excel export of the product catalog.

The workbook is meant to be edited and re-imported by business admins, so
the layout is fixed: a ``Products`` sheet with one row per product and two
columns per shop, a ``Shops`` reference sheet, and an ``Instructions``
sheet.
"""

from io import BytesIO

from django.utils import timezone
import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from apps.catalog.models import Product
from apps.tenants.models import Business

CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
ASSIGNED_MARK = '✓'

PRODUCT_COLUMNS = [
    ('Product ID', 28),
    ('Name', 30),
    ('SKU', 15),
    ('Description', 35),
    ('Category', 15),
    ('Brand', 15),
    ('Cost Price', 12),
    ('Cash Price', 12),
    ('Layaway Price', 14),
    ('Credit Price', 12),
    ('Low Stock Threshold', 18),
    ('Active', 8),
    ('Created At', 12),
]

SHOP_COLUMNS = [
    ('Shop Name', 25),
    ('Shop Slug', 20),
    ('Address', 40),
]


def write_header(worksheet, columns) -> None:
    """Bold titles in row 1 and fixed column widths."""
    bold_font = Font(bold=True)
    for column_index, (title, width) in enumerate(columns, start=1):
        cell = worksheet.cell(row=1, column=column_index)
        cell.value = title
        cell.font = bold_font
        worksheet.column_dimensions[get_column_letter(column_index)].width = width


def _instructions(business: Business, shops, exported_at) -> list[str]:
    shop_columns = ", ".join(
        f"[{shop.name}] Assigned, [{shop.name}] Stock" for shop in shops
    )
    return [
        "HOW TO UPDATE PRODUCTS VIA EXCEL",
        "",
        "SHOP COLUMNS FORMAT:",
        f"Each shop has two columns: {shop_columns or '(No shops created yet)'}",
        "",
        "1. ASSIGNING PRODUCT TO A SHOP:",
        f"   - Put {ASSIGNED_MARK} (checkmark) or 'Y' or 'YES' in [Shop Name] Assigned column",
        "   - Enter the stock quantity in [Shop Name] Stock column",
        "",
        "2. REMOVING PRODUCT FROM A SHOP:",
        "   - Clear the [Shop Name] Assigned column (leave empty or put 'N'/'NO')",
        "   - The stock column will be ignored",
        "",
        "3. UPDATING STOCK:",
        f"   - Keep {ASSIGNED_MARK} in Assigned column",
        "   - Change the stock number in the Stock column",
        "",
        "4. ADDING NEW PRODUCTS:",
        "   - Leave 'Product ID' empty or use 'NEW'",
        "   - Fill in product details and shop assignments",
        "",
        "5. DELETING/DEACTIVATING:",
        "   - Set 'Active' column to 'DELETE' or 'NO' to deactivate",
        "",
        "6. IMPORTANT NOTES:",
        "   - Do not modify 'Product ID' of existing products",
        "   - Do not rename shop column headers",
        "   - Category and Brand must match existing names",
        "   - Prices must be numbers (no currency symbols)",
        "   - See 'Shops' tab for list of all shops",
        "",
        f"Export Date: {exported_at:%Y-%m-%d %H:%M:%S}",
        f"Business: {business.name}",
    ]


def build_products_workbook(business: Business, *, exported_at=None) -> openpyxl.Workbook:
    """
    Build the catalog workbook for ``business``.

    Shops are listed in name order; each contributes an ``[<Shop>] Assigned``
    column (check mark when the product is assigned) and an
    ``[<Shop>] Stock`` column (blank when not assigned).
    """
    exported_at = exported_at or timezone.localtime()
    shops = list(business.shops.order_by('name'))
    products = (
        Product.objects
        .filter(business=business)
        .select_related('category', 'brand')
        .prefetch_related('shop_products')
        .order_by('name')
    )

    workbook = openpyxl.Workbook()
    if workbook.active and workbook.active.title == "Sheet":
        workbook.remove(workbook.active)

    # Products
    products_sheet = workbook.create_sheet(title="Products")
    shop_headers = []
    for shop in shops:
        shop_headers.append((f"[{shop.name}] Assigned", 12))
        shop_headers.append((f"[{shop.name}] Stock", 14))
    write_header(products_sheet, PRODUCT_COLUMNS + shop_headers)

    for product in products:
        stock_by_shop = {sp.shop_id: sp.stock_quantity for sp in product.shop_products.all()}
        row = [
            str(product.id),
            product.name,
            product.sku or "",
            product.description or "",
            product.category.name if product.category else "",
            product.brand.name if product.brand else "",
            float(product.cost_price),
            float(product.cash_price),
            float(product.layaway_price),
            float(product.credit_price),
            product.low_stock_threshold,
            "Yes" if product.is_active else "No",
            timezone.localtime(product.created_at).date().isoformat(),
        ]
        for shop in shops:
            assigned = shop.id in stock_by_shop
            row.append(ASSIGNED_MARK if assigned else "")
            row.append(stock_by_shop[shop.id] if assigned else "")
        products_sheet.append(row)

    # Shops
    shops_sheet = workbook.create_sheet(title="Shops")
    write_header(shops_sheet, SHOP_COLUMNS)
    for shop in shops:
        shops_sheet.append([shop.name, shop.slug, shop.address or ""])

    # Instructions
    instructions_sheet = workbook.create_sheet(title="Instructions")
    write_header(instructions_sheet, [("Instructions", 65)])
    for line in _instructions(business, shops, exported_at):
        instructions_sheet.append([line])

    return workbook


def export_filename(business: Business, *, exported_at=None) -> str:
    """``products_<Business_Name>_<YYYY-MM-DD>.xlsx``"""
    exported_at = exported_at or timezone.localtime()
    name = "_".join(business.name.split())
    return f"products_{name}_{exported_at:%Y-%m-%d}.xlsx"


def export_products(business: Business) -> tuple[bytes, str]:
    """Return the workbook bytes and download filename."""
    exported_at = timezone.localtime()
    workbook = build_products_workbook(business, exported_at=exported_at)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue(), export_filename(business, exported_at=exported_at)
