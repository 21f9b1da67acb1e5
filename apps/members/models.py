# members/models.py

from django.db import models
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


def get_default_subscription_per_share():
    """Default monthly subscription per share, configurable per deployment"""
    return Decimal(str(getattr(settings, 'COOPFUND_DEFAULT_SUBSCRIPTION_PER_SHARE', '1000')))


class Member(BaseModel):
    """
    Society member.

    Shares and the per-share subscription decide the monthly installment.
    ``lifetime_deposited`` is a cached total of the member's monthly deposit
    ledger entries and is only changed by the ledger services.
    """

    # =============================================================================
    # CHOICES
    # =============================================================================

    STATUS_CHOICES = (
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
    )

    # =============================================================================
    # CORE IDENTIFICATION
    # =============================================================================

    member_number = models.CharField(
        "Member Number",
        max_length=20,
        unique=True,
        blank=True,
        help_text="Unique member number within the society"
    )

    full_name = models.CharField(
        "Full Name",
        max_length=200,
        help_text="Member's full name"
    )

    national_id = models.CharField(
        "National ID",
        max_length=30,
        unique=True,
        help_text="National ID or other government ID number"
    )

    # =============================================================================
    # CONTACT
    # =============================================================================

    email = models.EmailField(
        "Email",
        blank=True,
        null=True,
        help_text="Email address for statements and notifications"
    )

    phone = models.CharField(
        "Phone",
        max_length=20,
        blank=True,
        null=True,
        help_text="Mobile phone number"
    )

    branch = models.CharField(
        "Branch",
        max_length=100,
        blank=True,
        null=True,
        db_index=True,
        help_text="Branch or collection point the member belongs to"
    )

    # =============================================================================
    # SHARES & SUBSCRIPTION
    # =============================================================================

    shares = models.PositiveIntegerField(
        "Shares",
        default=1,
        validators=[MinValueValidator(1)],
        help_text="Number of shares held"
    )

    monthly_subscription_per_share = models.DecimalField(
        "Monthly Subscription per Share",
        max_digits=15,
        decimal_places=2,
        default=get_default_subscription_per_share,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Amount due each month for every share"
    )

    joining_date = models.DateField(
        "Joining Date",
        help_text="Date the member joined; deposits fall due from the following month"
    )

    lifetime_deposited = models.DecimalField(
        "Lifetime Deposited",
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False,
        help_text="Total of all monthly share deposits (excludes fine payments)"
    )

    status = models.CharField(
        "Status",
        max_length=10,
        choices=STATUS_CHOICES,
        default='ACTIVE',
        db_index=True
    )

    # =============================================================================
    # PROPERTIES
    # =============================================================================

    @property
    def monthly_installment(self):
        """Amount the member owes every month"""
        from .utils import calculate_monthly_installment
        return calculate_monthly_installment(self.shares, self.monthly_subscription_per_share)

    @property
    def is_active(self):
        return self.status == 'ACTIVE'

    # =============================================================================
    # CLASS METHODS
    # =============================================================================

    @classmethod
    def get_active_members(cls):
        """Get all active members"""
        return cls.objects.filter(status='ACTIVE')

    # =============================================================================
    # VALIDATION
    # =============================================================================

    def clean(self):
        """Validate the member data"""
        super().clean()
        errors = {}

        if self.shares is not None and self.shares < 1:
            errors['shares'] = "A member must hold at least one share"

        if self.monthly_subscription_per_share is not None and self.monthly_subscription_per_share < 0:
            errors['monthly_subscription_per_share'] = "Subscription per share cannot be negative"

        if errors:
            raise ValidationError(errors)

    def __str__(self):
        return f"{self.full_name} ({self.member_number})"

    class Meta:
        db_table = 'members'
        verbose_name = 'Member'
        verbose_name_plural = 'Members'
        ordering = ['member_number']

        indexes = [
            models.Index(fields=['status']),
            models.Index(fields=['branch', 'status']),
            models.Index(fields=['joining_date']),
        ]
