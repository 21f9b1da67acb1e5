# treasury/signals.py

"""
Treasury Signals

- Primary account change tracking
- Account removal logging
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .models import TreasuryAccount

logger = logging.getLogger(__name__)


@receiver(post_save, sender=TreasuryAccount)
def log_account_saved(sender, instance, created, **kwargs):
    if created:
        logger.info(f"Opened treasury account {instance} ({instance.get_account_type_display()})")
    if instance.is_primary:
        logger.info(f"Primary treasury account is now {instance}")


@receiver(post_delete, sender=TreasuryAccount)
def log_account_deleted(sender, instance, **kwargs):
    if instance.balance:
        logger.warning(
            f"Deleted treasury account {instance} with non-zero balance {instance.balance}; "
            f"its ledger entries are kept without an account"
        )
    else:
        logger.info(f"Deleted treasury account {instance}")
