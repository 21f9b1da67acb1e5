# fines/models.py

from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# FINE POLICY MODEL
# =============================================================================

class FinePolicy(BaseModel):
    """
    Late-payment fine settings.
    Singleton model - only one instance allowed per database.
    """

    id = models.PositiveSmallIntegerField(primary_key=True, default=1, editable=False)

    grace_period_months = models.PositiveIntegerField(
        "Grace Period (Months)",
        default=1,
        help_text="Completed months a payment may be late before it attracts a fine"
    )

    fine_percentage = models.DecimalField(
        "Fine Percentage",
        max_digits=5,
        decimal_places=2,
        default=Decimal('5.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Percentage of the monthly installment charged per overdue month"
    )

    last_updated_by_id = models.CharField(
        "Last Updated By",
        max_length=50,
        null=True,
        blank=True
    )

    # -------------------------------------------------------------------------
    # SINGLETON PATTERN IMPLEMENTATION
    # -------------------------------------------------------------------------

    @classmethod
    def get_instance(cls):
        """
        Get or create the singleton fine policy.
        """
        instance, created = cls.objects.get_or_create(pk=1)
        if created:
            logger.info("Created default fine policy")
        return instance

    def save(self, *args, **kwargs):
        """
        Override save to ensure only one instance exists (singleton pattern).
        """
        self.pk = 1
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """
        Prevent deletion of the singleton instance.
        """
        pass

    def __str__(self):
        return f"Fine policy: {self.fine_percentage}% after {self.grace_period_months} month(s) grace"

    class Meta:
        db_table = 'fine_policy'
        verbose_name = "Fine Policy"
        verbose_name_plural = "Fine Policy"
