# ledger/apps.py

from django.apps import AppConfig


class LedgerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ledger"
    verbose_name = "Ledger"

    def ready(self):
        """
        Import signals when the app is ready.
        This ensures all signal handlers are registered.
        """
        import ledger.signals
