# notifications/dispatch.py

"""
Notification dispatcher.

Notifications are side effects of committed ledger writes: ``schedule_notification``
defers ``notify`` until the surrounding transaction commits, and nothing in
here ever raises back into the caller.
"""

from django.conf import settings
from django.db import transaction
from django.utils.module_loading import import_string
import logging

logger = logging.getLogger(__name__)

DEFAULT_BACKENDS = (
    'notifications.backends.InAppNotificationBackend',
    'notifications.backends.EmailNotificationBackend',
)


def get_backends():
    """Instantiate the configured backends, skipping any that fail to load"""
    backends = []
    for path in getattr(settings, 'NOTIFICATION_BACKENDS', DEFAULT_BACKENDS):
        try:
            backends.append(import_string(path)())
        except Exception as e:
            logger.error(f"Could not load notification backend {path}: {e}", exc_info=True)
    return backends


def notify(member_ids, title, body, notification_type='GENERAL', reference_id=None):
    """
    Deliver a notification to members through every backend.

    Failures are logged per recipient and per backend.

    Returns:
        int: number of successful deliveries
    """
    from members.models import Member

    member_ids = [member_id for member_id in (member_ids or []) if member_id]
    if not member_ids:
        return 0

    backends = get_backends()
    delivered = 0

    try:
        members = list(Member.objects.filter(pk__in=member_ids))
    except Exception as e:
        logger.error(f"Could not load notification recipients: {e}", exc_info=True)
        return 0

    for member in members:
        for backend in backends:
            try:
                if backend.send(member, title, body, notification_type, reference_id):
                    delivered += 1
            except Exception as e:
                logger.error(
                    f"{backend.__class__.__name__} failed for member {member.member_number}: {e}",
                    exc_info=True
                )

    logger.info(f"Sent '{title}' to {len(members)} member(s), {delivered} deliveries")
    return delivered


def schedule_notification(member_ids, title, body, notification_type='GENERAL', reference_id=None):
    """
    Send a notification once the current transaction commits.

    Outside a transaction it is sent immediately.
    """
    member_ids = list(member_ids or [])

    def _send():
        try:
            notify(member_ids, title, body, notification_type, reference_id)
        except Exception as e:
            logger.error(f"Notification '{title}' failed: {e}", exc_info=True)

    transaction.on_commit(_send)
