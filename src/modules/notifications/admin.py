from django.contrib import admin

from modules.notifications.models import NotificationJob


@admin.register(NotificationJob)
class NotificationJobAdmin(admin.ModelAdmin):
    list_display = ["id", "order", "to_email", "status", "created_at", "processed_at"]
    list_filter = ["status"]
    search_fields = ["to_email", "order__id"]
    readonly_fields = ["payload", "processed_at", "error_message", "created_at"]
