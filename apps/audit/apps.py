from django.apps import AppConfig  # type: ignore


class AuditConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.audit"
    label = "audit"

    def ready(self) -> None:
        from .handlers import register_handlers

        register_handlers()
