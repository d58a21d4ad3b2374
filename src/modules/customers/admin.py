from django.contrib import admin

from modules.customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ["full_name", "email", "phone", "principal_id", "created_at"]
    search_fields = ["full_name", "email", "principal_id"]
    readonly_fields = ["principal_id"]
