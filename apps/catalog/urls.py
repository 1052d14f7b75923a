from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'catalog'

BUSINESS = r'business-admin/(?P<business_slug>[-\w]+)'

router = SimpleRouter()
router.register(rf'{BUSINESS}/categories', views.CategoryViewSet, basename='category')
router.register(rf'{BUSINESS}/brands', views.BrandViewSet, basename='brand')
router.register(rf'{BUSINESS}/products', views.ProductViewSet, basename='product')
router.register(r'shop-admin/(?P<shop_slug>[-\w]+)/products', views.ShopProductViewSet, basename='shop-product')
router.register(r'sales-staff/(?P<shop_slug>[-\w]+)/products', views.SaleProductViewSet, basename='sale-product')

urlpatterns = [
    # GET /api/business-admin/<business_slug>/products/export/ - Excel download
    # Registered before the router so "export" is not taken as a product id.
    path(
        'business-admin/<slug:business_slug>/products/export/',
        views.export_products_view,
        name='product-export'
    ),

    # POST /api/business-admin/<business_slug>/products/import/ - Excel upload
    path(
        'business-admin/<slug:business_slug>/products/import/',
        views.import_products_view,
        name='product-import'
    ),

    path('', include(router.urls)),
]
