from django.contrib import admin

from modules.products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["sku", "name", "price_cents", "currency", "stock", "active"]
    list_filter = ["active"]
    search_fields = ["sku", "name"]
