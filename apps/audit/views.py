"""API views for the audit trail (administrators only)."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, viewsets  # type: ignore
from rest_framework.pagination import PageNumberPagination  # type: ignore

from .filters import AuditLogFilterSet
from .serializers import AuditLogSerializer
from .services import get_audit_logs


class AuditLogPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 100


class AuditLogViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = AuditLogSerializer
    permission_classes = [permissions.IsAuthenticated, permissions.IsAdminUser]
    pagination_class = AuditLogPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = AuditLogFilterSet

    def get_queryset(self):  # type: ignore
        return get_audit_logs()
