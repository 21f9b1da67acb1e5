# ledger/models.py

from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


class LedgerEntry(BaseModel):
    """
    Append-only record of every movement of society money.

    ``amount`` is always a positive magnitude; ``kind`` decides the sign of
    its effect on the referenced accounts (see ``get_balance_effects``).
    Entries without a member are society-level entries.
    """

    # =============================================================================
    # KINDS & WELL-KNOWN CATEGORIES
    # =============================================================================

    KIND_CHOICES = (
        ('DEPOSIT', 'Deposit'),
        ('EXPENSE', 'Expense'),
        ('TRANSFER', 'Transfer'),
        ('INVESTMENT_CAPITAL', 'Investment Capital'),
        ('ADJUSTMENT', 'Adjustment'),
    )

    MONTHLY_DEPOSIT = 'monthly_deposit'
    FINE_PAYMENT = 'fine_payment'
    FINE_WAIVER = 'fine_waiver'
    INVESTMENT_CAPITAL = 'investment_capital'
    INVESTMENT_PROFIT = 'investment_profit'
    INVESTMENT_EXPENSE = 'investment_expense'
    INVESTMENT_LIQUIDATION = 'investment_liquidation'
    INTERNAL_TRANSFER = 'internal_transfer'
    OPENING_BALANCE = 'opening_balance'

    # Categories that reduce a member's accrued fine
    FINE_REDUCTION_CATEGORIES = (FINE_WAIVER, FINE_PAYMENT)

    # Categories written only by their own ledger operations
    ENGINE_CATEGORIES = (
        MONTHLY_DEPOSIT,
        FINE_WAIVER,
        INVESTMENT_CAPITAL,
        INVESTMENT_PROFIT,
        INVESTMENT_EXPENSE,
        INVESTMENT_LIQUIDATION,
        INTERNAL_TRANSFER,
        OPENING_BALANCE,
    )

    # =============================================================================
    # FIELDS
    # =============================================================================

    member = models.ForeignKey(
        'members.Member',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ledger_entries',
        help_text="Member the entry belongs to; empty for society-level entries"
    )

    kind = models.CharField(
        "Kind",
        max_length=20,
        choices=KIND_CHOICES,
        db_index=True
    )

    category = models.CharField(
        "Category",
        max_length=100,
        db_index=True,
        help_text="Category, e.g. monthly_deposit, fine_payment or an expense head"
    )

    subcategory = models.CharField(
        "Subcategory",
        max_length=150,
        blank=True,
        null=True,
        help_text="Free-form subcategory; for investment entries the project name"
    )

    amount = models.DecimalField(
        "Amount",
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Positive magnitude of the movement"
    )

    period_month = models.PositiveSmallIntegerField(
        "Period Month",
        validators=[MinValueValidator(1), MaxValueValidator(12)]
    )

    period_year = models.PositiveIntegerField("Period Year")

    date = models.DateField("Date", db_index=True)

    treasury_account = models.ForeignKey(
        'treasury.TreasuryAccount',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ledger_entries',
        help_text="Account affected; the destination for transfers"
    )

    transfer_from_account = models.ForeignKey(
        'treasury.TreasuryAccount',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='outgoing_transfers',
        help_text="Source account (transfers only)"
    )

    investment = models.ForeignKey(
        'investments.Investment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ledger_entries',
        help_text="Investment project the entry belongs to"
    )

    recorded_by_id = models.CharField(
        "Recorded By",
        max_length=50,
        null=True,
        blank=True,
        db_index=True
    )

    remarks = models.TextField("Remarks", blank=True, null=True)

    # =============================================================================
    # SIGNED EFFECTS
    # =============================================================================

    def get_balance_effects(self):
        """
        Signed effect of this entry on the accounts it references.

        Returns:
            list: (account_id, signed Decimal) pairs; accounts that no longer
            exist are left out
        """
        amount = self.amount
        if self.kind == 'DEPOSIT':
            pairs = [(self.treasury_account_id, amount)]
        elif self.kind in ('EXPENSE', 'INVESTMENT_CAPITAL'):
            pairs = [(self.treasury_account_id, -amount)]
        elif self.kind == 'TRANSFER':
            pairs = [(self.transfer_from_account_id, -amount), (self.treasury_account_id, amount)]
        else:
            pairs = []
        return [(account_id, delta) for account_id, delta in pairs if account_id]

    @property
    def is_share_deposit(self):
        return self.kind == 'DEPOSIT' and self.category == self.MONTHLY_DEPOSIT

    @property
    def signed_amount(self):
        """Amount as seen from the society's cash position"""
        if self.kind == 'DEPOSIT':
            return self.amount
        if self.kind in ('EXPENSE', 'INVESTMENT_CAPITAL'):
            return -self.amount
        return Decimal('0.00')

    # =============================================================================
    # VALIDATION
    # =============================================================================

    def clean(self):
        super().clean()
        errors = {}

        if self.amount is not None and self.amount <= 0:
            errors['amount'] = "Amount must be greater than zero"

        if self.kind == 'TRANSFER':
            if not self.transfer_from_account_id:
                errors['transfer_from_account'] = "Transfers need a source account"
            elif self.transfer_from_account_id == self.treasury_account_id:
                errors['treasury_account'] = "Source and destination accounts must differ"
        elif self.transfer_from_account_id:
            errors['transfer_from_account'] = "Only transfers have a source account"

        if self.kind == 'ADJUSTMENT' and self.treasury_account_id:
            errors['treasury_account'] = "Adjustments never touch an account"

        if errors:
            raise ValidationError(errors)

    def __str__(self):
        return f"{self.get_kind_display()} {self.category} {self.amount} ({self.date})"

    class Meta:
        db_table = 'ledger_entries'
        verbose_name = 'Ledger Entry'
        verbose_name_plural = 'Ledger Entries'
        ordering = ['-date', '-created_at']

        indexes = [
            models.Index(fields=['period_year', 'period_month']),
            models.Index(fields=['member', 'category']),
            models.Index(fields=['kind', 'category']),
            models.Index(fields=['treasury_account', 'date']),
        ]


class Category(BaseModel):
    """
    Registered income or expense category.

    Generic income and expenses must name an active category of the matching
    type. Engine categories (monthly deposits, investment movements,
    transfers...) are written by their own operations and never registered.
    """

    TYPE_CHOICES = (
        ('DEPOSIT', 'Deposit'),
        ('EXPENSE', 'Expense'),
    )

    name = models.CharField(
        "Name",
        max_length=50,
        unique=True,
        help_text="Category name stored on ledger entries"
    )

    category_type = models.CharField(
        "Type",
        max_length=10,
        choices=TYPE_CHOICES,
        db_index=True,
        help_text="Whether the category is used for income or expenses"
    )

    subcategories = models.JSONField(
        "Subcategories",
        default=list,
        blank=True,
        help_text="Allowed subcategory names; empty allows any"
    )

    is_active = models.BooleanField(
        "Active",
        default=True,
        help_text="Inactive categories cannot be used for new entries"
    )

    def clean(self):
        super().clean()
        if self.name in LedgerEntry.ENGINE_CATEGORIES:
            raise ValidationError({'name': f"'{self.name}' is reserved for ledger operations"})
        if self.subcategories is None:
            self.subcategories = []
        if not isinstance(self.subcategories, list) or not all(
            isinstance(name, str) and name.strip() for name in self.subcategories
        ):
            raise ValidationError({'subcategories': "Subcategories must be a list of names"})
        self.subcategories = [name.strip() for name in self.subcategories]

    def __str__(self):
        return f"{self.name} ({self.get_category_type_display()})"

    class Meta:
        db_table = 'ledger_categories'
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'
        ordering = ['name']
