"""Serializers for the audit trail."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    actor_id = serializers.ReadOnlyField()

    class Meta:
        model = AuditLog
        fields = ["id", "actor_id", "action", "entity_type", "entity_id", "payload", "created_at"]
        read_only_fields = fields
