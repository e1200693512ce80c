from django.contrib import admin
from django.urls import path, include
from inventory import views as inventory_views
from products import views as products_views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('products', products_views.products_api),
    path('products/', include('products.urls', namespace='products')),
    path('inventory', inventory_views.inventory_api),
    path('inventory/', include('inventory.urls', namespace='inventory')),
    path('', include('reports.urls', namespace='reports')),
]
