# core/models.py

from django.db import models
from django.core.exceptions import ValidationError
from decimal import Decimal, InvalidOperation
import pycountry
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


DEFAULT_TIMEZONE = 'Asia/Dhaka'


def validate_currency_code(value):
    """Reject codes that are not ISO 4217 currencies"""
    if not value or pycountry.currencies.get(alpha_3=value.upper()) is None:
        raise ValidationError(f"'{value}' is not an ISO 4217 currency code")


# =============================================================================
# SOCIETY CONFIGURATION MODEL
# =============================================================================

class SaccoConfiguration(BaseModel):
    """
    Operational configuration for the society.
    Singleton model - only one instance allowed per database.
    """

    id = models.PositiveSmallIntegerField(primary_key=True, default=1, editable=False)

    # -------------------------------------------------------------------------
    # IDENTITY
    # -------------------------------------------------------------------------

    society_name = models.CharField(
        "Society Name",
        max_length=150,
        default='Cooperative Savings Society',
        help_text="Name printed on statements and notifications"
    )

    # -------------------------------------------------------------------------
    # CURRENCY CONFIGURATION
    # -------------------------------------------------------------------------

    currency_code = models.CharField(
        "Currency",
        max_length=3,
        default='BDT',
        validators=[validate_currency_code],
        help_text="Currency for all ledger amounts (ISO 4217 code)"
    )

    # -------------------------------------------------------------------------
    # TIMEZONE CONFIGURATION
    # -------------------------------------------------------------------------

    operational_timezone = models.CharField(
        "Operational Timezone",
        max_length=63,
        default=DEFAULT_TIMEZONE,
        help_text="Timezone for deposit periods and fine accrual"
    )

    # -------------------------------------------------------------------------
    # COMMUNICATION CONFIGURATION
    # -------------------------------------------------------------------------

    enable_email_notifications = models.BooleanField(
        "Enable Email Notifications",
        default=True,
        help_text="Send email notifications to members"
    )

    enable_in_app_notifications = models.BooleanField(
        "Enable In-App Notifications",
        default=True,
        help_text="Store bell notifications for members"
    )

    # -------------------------------------------------------------------------
    # TIMEZONE HELPERS
    # -------------------------------------------------------------------------

    def get_timezone(self):
        """
        Get the operational timezone as a ZoneInfo object.

        Returns:
            ZoneInfo: Timezone object for the configured operational timezone
        """
        from zoneinfo import ZoneInfo
        try:
            return ZoneInfo(self.operational_timezone)
        except Exception as e:
            logger.warning(f"Invalid timezone '{self.operational_timezone}': {e}. Falling back to {DEFAULT_TIMEZONE}")
            return ZoneInfo(DEFAULT_TIMEZONE)

    def format_currency(self, amount, include_symbol=True):
        """Format amount using the society currency"""
        try:
            formatted = f"{Decimal(str(amount or 0)):,.2f}"
        except (ValueError, TypeError, InvalidOperation):
            formatted = "0.00"
        return f"{self.currency_code} {formatted}" if include_symbol else formatted

    # -------------------------------------------------------------------------
    # CURRENCY HELPER METHODS
    # -------------------------------------------------------------------------

    @staticmethod
    def get_currency_choices():
        """
        Currency choices from pycountry as (code, "Name (CODE)") tuples.
        """
        currencies = [
            (currency.alpha_3, f"{currency.name} ({currency.alpha_3})")
            for currency in pycountry.currencies
        ]
        return sorted(currencies, key=lambda x: x[1])

    # -------------------------------------------------------------------------
    # SINGLETON PATTERN IMPLEMENTATION
    # -------------------------------------------------------------------------

    @classmethod
    def get_instance(cls):
        """
        Get or create the singleton instance of SaccoConfiguration.
        """
        instance, created = cls.objects.get_or_create(pk=1)
        if created:
            logger.info("Created default society configuration")
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
        return f"{self.society_name} configuration"

    class Meta:
        verbose_name = "Society Configuration"
        verbose_name_plural = "Society Configuration"
