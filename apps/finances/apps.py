from django.apps import AppConfig


class FinancesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.finances"
    verbose_name = "Finances"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .application.event_handlers import register_handlers

        register_handlers(message_bus)
