"""Django app configuration for records app."""

from django.apps import AppConfig


class RecordsConfig(AppConfig):
    """Configuration for records app."""

    name = 'server.apps.records'
    verbose_name = 'Records'
