# notifications/backends.py

"""
Notification delivery backends.

Backends are listed in ``settings.NOTIFICATION_BACKENDS`` as dotted paths.
Each one receives a single member and either delivers or raises.
"""

from django.conf import settings
from django.core.mail import send_mail
import logging

logger = logging.getLogger(__name__)


class BaseNotificationBackend:
    """Interface for delivery channels"""

    def send(self, member, title, body, notification_type='GENERAL', reference_id=None):
        raise NotImplementedError


class InAppNotificationBackend(BaseNotificationBackend):
    """Store a bell notification for the member"""

    def send(self, member, title, body, notification_type='GENERAL', reference_id=None):
        from core.models import SaccoConfiguration
        from .models import Notification

        if not SaccoConfiguration.get_instance().enable_in_app_notifications:
            return False

        Notification.objects.create(
            member=member,
            title=title,
            body=body,
            notification_type=notification_type,
            reference_id=str(reference_id) if reference_id else None,
            delivered=True,
        )
        return True


class EmailNotificationBackend(BaseNotificationBackend):
    """Email the member when they have an address on file"""

    def send(self, member, title, body, notification_type='GENERAL', reference_id=None):
        from core.models import SaccoConfiguration

        config = SaccoConfiguration.get_instance()
        if not config.enable_email_notifications or not member.email:
            return False

        send_mail(
            subject=f"{config.society_name}: {title}",
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[member.email],
            fail_silently=False,
        )
        return True
