# ledger/signals.py

"""
Ledger Signals

- Entry creation and deletion logging
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .models import LedgerEntry

logger = logging.getLogger(__name__)


@receiver(post_save, sender=LedgerEntry)
def log_entry_created(sender, instance, created, **kwargs):
    if created:
        logger.debug(
            f"Ledger entry {instance.pk}: {instance.kind}/{instance.category} {instance.amount} "
            f"period {instance.period_month:02d}/{instance.period_year}"
        )


@receiver(post_delete, sender=LedgerEntry)
def log_entry_deleted(sender, instance, **kwargs):
    logger.info(f"Ledger entry {instance.pk} removed: {instance.kind}/{instance.category} {instance.amount}")
