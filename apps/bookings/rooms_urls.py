"""URL routing for room search across the booking calendar."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import RoomSearchView

urlpatterns = [
    path("search/", RoomSearchView.as_view(), name="room-search"),
]
