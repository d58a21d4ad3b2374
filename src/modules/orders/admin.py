from django.contrib import admin

from modules.orders.models import Order, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ["product", "quantity", "unit_price_cents", "created_at"]
    can_delete = False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ["old_status", "new_status", "changed_by", "notes", "created_at"]
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ["id", "customer", "status", "total_cents", "placed_at"]
    list_filter = ["status"]
    search_fields = ["id", "customer__email", "customer__full_name"]
    readonly_fields = ["status", "total_cents", "placed_at", "created_at", "updated_at"]
    inlines = [OrderItemInline, OrderStatusHistoryInline]
