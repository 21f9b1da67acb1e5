# investments/signals.py

"""
Investment Signals

- Status change tracking
"""

from django.db.models.signals import pre_save
from django.dispatch import receiver
import logging

from .models import Investment

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Investment)
def track_investment_status(sender, instance, **kwargs):
    """Log status transitions"""
    if instance._state.adding:
        return

    old_status = Investment.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
    if old_status and old_status != instance.status:
        logger.info(f"Investment '{instance.project_name}' status changed: {old_status} -> {instance.status}")
