# notifications/models.py

from django.db import models
from django.utils import timezone
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """Bell notification stored for a member"""

    TYPE_CHOICES = (
        ('GENERAL', 'General'),
        ('PAYMENT', 'Payment'),
        ('ANNOUNCEMENT', 'Announcement'),
        ('ALERT', 'Alert'),
    )

    member = models.ForeignKey(
        'members.Member',
        on_delete=models.CASCADE,
        related_name='notifications'
    )

    title = models.CharField("Title", max_length=200)
    body = models.TextField("Body")

    notification_type = models.CharField(
        "Type",
        max_length=15,
        choices=TYPE_CHOICES,
        default='GENERAL',
        db_index=True
    )

    reference_id = models.CharField(
        "Reference",
        max_length=50,
        blank=True,
        null=True,
        help_text="ID of the ledger entry or investment the notification is about"
    )

    delivered = models.BooleanField("Delivered", default=False)
    read = models.BooleanField("Read", default=False, db_index=True)

    sent_at = models.DateTimeField("Sent At", default=timezone.now)
    read_at = models.DateTimeField("Read At", null=True, blank=True)

    def mark_as_read(self):
        if not self.read:
            self.read = True
            self.read_at = timezone.now()
            self.save(update_fields=['read', 'read_at', 'updated_at'])

    def __str__(self):
        return f"{self.title} -> {self.member_id}"

    class Meta:
        db_table = 'notifications'
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'
        ordering = ['-sent_at']

        indexes = [
            models.Index(fields=['member', 'read']),
        ]
