from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Outbox storage, relay task, health check and request middleware."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.core"
    label = "core"
    verbose_name = "Storefront core"
