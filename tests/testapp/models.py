"""Test-only models: one soft-deletable record, one plain model."""

from django.db import models

from server.apps.records.models import Record


class Note(Record):
    """Soft-deletable record unrelated to files."""

    title = models.CharField(max_length=100)


class Label(models.Model):
    """Plain model without the soft-delete capability."""

    name = models.CharField(max_length=50, unique=True)
