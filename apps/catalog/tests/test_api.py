import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status

from apps.catalog.models import Category, Product, ShopProduct
from apps.catalog.services import CONTENT_TYPE
from apps.purchases.services import create_purchase


def catalog_url(name, business, **kwargs):
    return reverse(f'catalog:{name}', kwargs={'business_slug': business.slug, **kwargs})


# =============================================================================
# Taxonomy
# =============================================================================

@pytest.mark.django_db
class TestTaxonomy:
    """Tests for /api/business-admin/<business_slug>/categories/ and /brands/"""

    def test_create_category(self, owner_client, business):
        response = owner_client.post(
            catalog_url('category-list', business), {'name': ' Electronics '}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['data']['name'] == 'Electronics'

    def test_duplicate_name_is_case_insensitive(self, owner_client, business):
        Category.objects.create(business=business, name='Furniture')
        response = owner_client.post(catalog_url('category-list', business), {'name': 'furniture'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False

    def test_same_name_in_other_business(self, rival_client, other_business, business):
        Category.objects.create(business=business, name='Furniture')
        response = rival_client.post(
            catalog_url('category-list', other_business), {'name': 'Furniture'}, format='json'
        )
        assert response.status_code == status.HTTP_201_CREATED

    def test_brand_lifecycle(self, owner_client, business):
        created = owner_client.post(catalog_url('brand-list', business), {'name': 'Nasco'}, format='json')
        brand_id = created.data['data']['id']

        response = owner_client.delete(catalog_url('brand-detail', business, pk=brand_id))
        assert response.status_code == status.HTTP_200_OK
        assert owner_client.get(catalog_url('brand-list', business)).data == []


# =============================================================================
# Products
# =============================================================================

@pytest.mark.django_db
class TestProducts:
    """Tests for /api/business-admin/<business_slug>/products/"""

    def test_create_with_shop_stock(self, owner_client, business, shop):
        data = {
            'name': 'Fridge',
            'sku': 'FR-1',
            'cost_price': '1500.00',
            'cash_price': '2000.00',
            'layaway_price': '2100.00',
            'credit_price': '2300.00',
            'shops': [{'shop_id': str(shop.id), 'stock_quantity': 4}],
        }
        response = owner_client.post(catalog_url('product-list', business), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['data']['credit_price'] == '2300.00'
        assert response.data['data']['shops'][0]['stock_quantity'] == 4

    def test_duplicate_sku(self, owner_client, business, product):
        response = owner_client.post(
            catalog_url('product-list', business), {'name': 'Another TV', 'sku': 'TV-32'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'A product with this SKU already exists'

    def test_stock_for_foreign_shop_is_rejected(self, owner_client, business, product, other_shop):
        response = owner_client.post(
            catalog_url('product-stock', business, pk=product.id),
            {'shop_id': str(other_shop.id), 'stock_quantity': 3},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_and_toggle(self, owner_client, business, product):
        response = owner_client.patch(
            catalog_url('product-detail', business, pk=product.id), {'cash_price': '850.00'}, format='json'
        )
        assert response.data['data']['cash_price'] == '850.00'

        response = owner_client.post(catalog_url('product-toggle', business, pk=product.id))
        assert response.data['data']['is_active'] is False

    def test_search(self, owner_client, business, product):
        url = catalog_url('product-list', business)
        assert owner_client.get(url, {'search': 'tele'}).data['count'] == 1
        assert owner_client.get(url, {'search': 'sofa'}).data['count'] == 0

    def test_sold_product_is_deactivated_not_deleted(self, owner_client, business, shop, customer, product, business_owner):
        create_purchase(shop=shop, customer_id=customer.id, items=[{'product_id': product.id}], actor=business_owner)

        response = owner_client.delete(catalog_url('product-detail', business, pk=product.id))

        assert response.status_code == status.HTTP_200_OK
        product.refresh_from_db()
        assert product.is_active is False

    def test_unsold_product_is_deleted(self, owner_client, business, product):
        owner_client.delete(catalog_url('product-detail', business, pk=product.id))
        assert not Product.objects.exists()

    def test_shop_admin_cannot_manage_catalog(self, shop_admin_client, business):
        response = shop_admin_client.get(catalog_url('product-list', business))
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestShopProducts:

    def test_shop_admin_sees_shop_stock(self, shop_admin_client, shop, product):
        response = shop_admin_client.get(reverse('catalog:shop-product-list', kwargs={'shop_slug': shop.slug}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['results'][0]['stock_quantity'] == 10

    def test_sales_staff_only_see_stocked_products(self, sales_client, shop, product, business):
        empty = Product.objects.create(business=business, name='Sofa', cash_price=Decimal('100'))
        ShopProduct.objects.create(shop=shop, product=empty, stock_quantity=0)

        response = sales_client.get(reverse('catalog:sale-product-list', kwargs={'shop_slug': shop.slug}))

        assert [row['name'] for row in response.data['results']] == [product.name]


@pytest.mark.django_db
class TestExportEndpoint:

    def test_download(self, owner_client, business, product):
        response = owner_client.get(catalog_url('product-export', business))

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == CONTENT_TYPE
        assert response['Content-Disposition'].startswith('attachment; filename="products_Acme_Electronics_')

    def test_requires_business_admin(self, shop_admin_client, business):
        response = shop_admin_client.get(catalog_url('product-export', business))
        assert response.status_code == status.HTTP_403_FORBIDDEN
