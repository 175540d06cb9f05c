"""Email notification URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.notifications.views import (
    CustomNotificationView,
    OrderConfirmationByNumberView,
    OrderConfirmationView,
)

urlpatterns = [
    path(
        "email/order-confirmation",
        OrderConfirmationView.as_view(),
        name="email-order-confirmation",
    ),
    path(
        "email/order-confirmation-by-number",
        OrderConfirmationByNumberView.as_view(),
        name="email-order-confirmation-by-number",
    ),
    path(
        "email/custom-notification",
        CustomNotificationView.as_view(),
        name="email-custom-notification",
    ),
]
