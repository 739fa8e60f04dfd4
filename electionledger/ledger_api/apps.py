from django.apps import AppConfig


class LedgerApiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'ledger_api'
    verbose_name = "Election ledger"
