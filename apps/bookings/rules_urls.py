"""URL routing for the booking rule configuration."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import RuleConfigView

urlpatterns = [
    path("", RuleConfigView.as_view(), name="booking-rules"),
]
