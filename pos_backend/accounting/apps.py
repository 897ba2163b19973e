# accounting/apps.py

from django.apps import AppConfig


class AccountingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"

    def ready(self):
        # Registers the receivable trigger on sales invoice inserts.
        from . import signals  # noqa: F401
