"""FilterSet for the admin audit log listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import AuditLog


class AuditLogFilterSet(django_filters.FilterSet):
    actor = django_filters.NumberFilter(field_name="actor_id", lookup_expr="exact")
    entity_type = django_filters.CharFilter(field_name="entity_type", lookup_expr="exact")
    entity_id = django_filters.CharFilter(field_name="entity_id", lookup_expr="exact")
    action = django_filters.CharFilter(field_name="action", lookup_expr="exact")
    start_date = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    end_date = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = AuditLog
        fields = ["actor", "entity_type", "entity_id", "action", "start_date", "end_date"]
