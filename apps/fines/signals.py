# fines/signals.py

"""
Fine Signals

- Policy change tracking
"""

from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

from .models import FinePolicy

logger = logging.getLogger(__name__)


@receiver(post_save, sender=FinePolicy)
def log_policy_change(sender, instance, created, **kwargs):
    action = "Created" if created else "Saved"
    logger.info(
        f"{action} fine policy: {instance.fine_percentage}% after "
        f"{instance.grace_period_months} month(s) grace (by {instance.last_updated_by_id or 'system'})"
    )
