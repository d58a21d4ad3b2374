"""Customer URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.customers.views import CustomerMeView

urlpatterns = [
    path("customers/me/", CustomerMeView.as_view(), name="customer_me"),
]
