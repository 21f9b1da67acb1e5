# members/signals.py

"""
Members Signals

- Member number generation
- Status change tracking

Number generation is delegated to utils.py.
"""

from django.db.models.signals import pre_save, post_save
from django.dispatch import receiver
import logging

from .models import Member

logger = logging.getLogger(__name__)


# =============================================================================
# MEMBER SIGNALS
# =============================================================================

@receiver(pre_save, sender=Member)
def generate_member_number(sender, instance, **kwargs):
    """
    Generate member number if not set.
    Delegates to utils.generate_member_number() for generation logic.
    """
    if not instance.member_number:
        from .utils import generate_member_number as gen_number

        instance.member_number = gen_number('MBR')


@receiver(pre_save, sender=Member)
def track_status_change(sender, instance, **kwargs):
    """Log status transitions on existing members"""
    if instance._state.adding:
        return

    try:
        old_status = Member.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
    except Exception as e:
        logger.error(f"Error reading previous status for member {instance.pk}: {e}")
        return

    if old_status and old_status != instance.status:
        logger.info(
            f"Member {instance.member_number} status changed: {old_status} -> {instance.status}"
        )


@receiver(post_save, sender=Member)
def log_member_registration(sender, instance, created, **kwargs):
    """Log new member registrations"""
    if created:
        logger.info(
            f"Registered member {instance.member_number} ({instance.full_name}) "
            f"with {instance.shares} share(s) from {instance.joining_date}"
        )
