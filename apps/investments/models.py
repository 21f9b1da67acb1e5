# investments/models.py

from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


def legal_document_upload_path(instance, filename):
    """Store legal documents under investments/<project id>/"""
    return f"investments/{instance.id}/{filename}"


class Investment(BaseModel):
    """
    Investment project funded from a treasury account.

    The capital leaves the funding account through an INVESTMENT_CAPITAL
    ledger entry. Profits and expenses recorded later move
    ``cumulative_profit``.
    """

    STATUS_CHOICES = (
        ('ACTIVE', 'Active'),
        ('COMPLETED', 'Completed'),
        ('CANCELLED', 'Cancelled'),
    )

    project_name = models.CharField(
        "Project Name",
        max_length=200,
        help_text="Name of the investment project"
    )

    capital_amount = models.DecimalField(
        "Capital Amount",
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        editable=False,
        help_text="Initial capital invested"
    )

    funding_account = models.ForeignKey(
        'treasury.TreasuryAccount',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='funded_investments',
        help_text="Account the capital was drawn from"
    )

    cumulative_profit = models.DecimalField(
        "Cumulative Profit",
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False,
        help_text="Profits minus expenses recorded so far (may be negative)"
    )

    status = models.CharField(
        "Status",
        max_length=10,
        choices=STATUS_CHOICES,
        default='ACTIVE',
        db_index=True
    )

    date = models.DateField("Investment Date")

    legal_document = models.FileField(
        "Legal Document",
        upload_to=legal_document_upload_path,
        blank=True,
        null=True,
        max_length=255,
        help_text="Agreement or deed for the project"
    )

    recorded_by_id = models.CharField(
        "Recorded By",
        max_length=50,
        null=True,
        blank=True
    )

    remarks = models.TextField("Remarks", blank=True, null=True)

    @property
    def roi(self):
        """Return on investment as a percentage, 2 dp"""
        from .utils import calculate_roi
        return calculate_roi(self.cumulative_profit, self.capital_amount)

    @classmethod
    def get_active_investments(cls):
        return cls.objects.filter(status='ACTIVE')

    def __str__(self):
        return f"{self.project_name} ({self.get_status_display()})"

    class Meta:
        db_table = 'investments'
        verbose_name = 'Investment'
        verbose_name_plural = 'Investments'
        ordering = ['-date', '-created_at']

        indexes = [
            models.Index(fields=['status']),
            models.Index(fields=['project_name']),
        ]
