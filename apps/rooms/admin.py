"""Admin registration for rooms and maintenance windows."""

from __future__ import annotations

from django.contrib import admin

from .models import MaintenanceBlock, Room


class MaintenanceBlockInline(admin.TabularInline):
    model = MaintenanceBlock
    extra = 0
    fields = ("start_at", "end_at", "reason")


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("name", "capacity", "status", "updated_at")
    list_filter = ("status",)
    search_fields = ("name",)
    inlines = [MaintenanceBlockInline]


@admin.register(MaintenanceBlock)
class MaintenanceBlockAdmin(admin.ModelAdmin):
    list_display = ("room", "start_at", "end_at", "reason")
    list_filter = ("room",)
    date_hierarchy = "start_at"
