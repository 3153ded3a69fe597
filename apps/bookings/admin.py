"""Admin registration for bookings.

Bookings are read-only here; staff cancel them through the same command
the API uses. Rule edits are validated as a whole record and saved through
``update_rules`` so the change is audited.
"""

from __future__ import annotations

from django import forms  # type: ignore
from django.contrib import admin, messages  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore

from .application.command_handlers import cancel_booking
from .application.rule_config import update_rules
from .domain.errors import BookingRejected, RuleConfigError
from .domain.rules import BookingRules, validate_rule_values
from .models import Booking, RuleConfig


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "room",
        "user",
        "status",
        "start_at",
        "end_at",
        "created_at",
    )
    list_filter = ("status", "room", "start_at")
    search_fields = ("room__name", "user__username", "user__email")
    readonly_fields = (
        "user",
        "room",
        "start_at",
        "end_at",
        "status",
        "created_at",
        "updated_at",
        "cancelled_at",
        "cancelled_by",
    )
    actions = ["cancel_bookings"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Cancel selected bookings")
    def cancel_bookings(self, request, queryset):
        cancelled = 0
        for booking_id in queryset.values_list("pk", flat=True):
            try:
                cancel_booking(booking_id, request.user.pk, is_admin=True)
            except BookingRejected as exc:
                self.message_user(request, f"Booking #{booking_id}: {exc.message}", level=messages.WARNING)
            else:
                cancelled += 1
        if cancelled:
            self.message_user(request, f"Cancelled {cancelled} booking(s).", level=messages.SUCCESS)


class RuleConfigAdminForm(forms.ModelForm):
    class Meta:
        model = RuleConfig
        fields = list(BookingRules.field_names())

    def clean(self):
        cleaned_data = super().clean()
        merged = {
            name: cleaned_data.get(name, getattr(self.instance, name, None))
            for name in BookingRules.field_names()
        }
        try:
            validate_rule_values(merged)
        except RuleConfigError as exc:
            raise ValidationError(exc.message, code=exc.code) from exc
        return cleaned_data


@admin.register(RuleConfig)
class RuleConfigAdmin(admin.ModelAdmin):
    form = RuleConfigAdminForm
    list_display = (
        "open_hour",
        "close_hour",
        "slot_interval_minutes",
        "min_duration_minutes",
        "max_duration_minutes",
        "max_active_bookings",
        "updated_at",
    )
    readonly_fields = ("created_at", "updated_at")

    def has_add_permission(self, request):
        return not RuleConfig.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False

    def save_model(self, request, obj, form, change):
        if not change:
            super().save_model(request, obj, form, change)
            return

        changes = {name: form.cleaned_data[name] for name in form.changed_data if name in form.cleaned_data}
        if changes:
            update_rules(changes, actor_id=request.user.pk)
