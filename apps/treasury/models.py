# treasury/models.py

from django.db import models
from django.db.models import Q
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


class TreasuryAccount(BaseModel):
    """
    Bank account holding society funds.

    ``balance`` is signed and must always equal the signed sum of the ledger
    entries that reference the account. It is changed only by the ledger
    services through F() updates. At most one account is the primary
    account that receives monthly deposits.
    """

    ACCOUNT_TYPE_CHOICES = (
        ('CURRENT', 'Current Account'),
        ('SAVINGS', 'Savings Account'),
        ('FDR', 'Fixed Deposit Receipt'),
        ('DPS', 'Deposit Pension Scheme'),
    )

    bank_name = models.CharField(
        "Bank Name",
        max_length=150,
        help_text="Name of the bank or financial institution"
    )

    account_number = models.CharField(
        "Account Number",
        max_length=50,
        unique=True,
        help_text="Bank account number"
    )

    account_type = models.CharField(
        "Account Type",
        max_length=10,
        choices=ACCOUNT_TYPE_CHOICES,
        default='SAVINGS'
    )

    account_holder_names = models.JSONField(
        "Account Holders",
        default=list,
        blank=True,
        help_text="Names of the signatories on the account"
    )

    balance = models.DecimalField(
        "Balance",
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False,
        help_text="Current balance derived from the ledger"
    )

    is_primary = models.BooleanField(
        "Primary Account",
        default=False,
        db_index=True,
        help_text="Receives all monthly share deposits"
    )

    last_updated_by_id = models.CharField(
        "Last Updated By",
        max_length=50,
        null=True,
        blank=True,
        help_text="ID of the user who last moved money in this account"
    )

    @classmethod
    def get_primary(cls):
        """Get the primary account, or None"""
        return cls.objects.filter(is_primary=True).first()

    def clean(self):
        super().clean()
        if self.account_holder_names is not None and not isinstance(self.account_holder_names, list):
            raise ValidationError({'account_holder_names': "Account holders must be a list of names"})

    def save(self, *args, **kwargs):
        """Save with primary handling"""
        if self.is_primary:
            TreasuryAccount.objects.filter(is_primary=True).exclude(pk=self.pk).update(is_primary=False)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.bank_name} - {self.account_number}"

    class Meta:
        db_table = 'treasury_accounts'
        verbose_name = 'Treasury Account'
        verbose_name_plural = 'Treasury Accounts'
        ordering = ['-is_primary', 'bank_name', 'account_number']

        constraints = [
            models.UniqueConstraint(
                fields=['is_primary'],
                condition=Q(is_primary=True),
                name='single_primary_treasury_account'
            )
        ]
