"""
Ledger app configuration.
Append-only traded-volume entries and platform statistics.
"""
from django.apps import AppConfig


class LedgerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.ledger'
    verbose_name = 'Statistics Ledger'
