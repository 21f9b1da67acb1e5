# treasury/services.py

"""
Account Registry Services

- Account lookup and row locking
- Signed balance updates through F() expressions
- Primary account designation
- Account lifecycle (create, update, delete)
"""

from django.db import transaction
from django.db.models import F
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from core.exceptions import TreasuryAccountNotFound, PrimaryAccountNotConfigured
from core.utils import to_money, fetch_or_raise, lock_rows, get_sacco_today
from utils.models import get_actor_id
from .models import TreasuryAccount

logger = logging.getLogger(__name__)


class TreasuryAccountService:
    """Maintain the pool of treasury accounts"""

    EDITABLE_FIELDS = ('bank_name', 'account_number', 'account_type', 'account_holder_names')

    # =============================================================================
    # LOOKUP & LOCKING
    # =============================================================================

    @staticmethod
    def get_account(account_id, lock=False):
        """Fetch an account or raise TreasuryAccountNotFound"""
        return fetch_or_raise(TreasuryAccount, account_id, TreasuryAccountNotFound, lock=lock)

    @staticmethod
    def get_primary_account(lock=False):
        """
        Get the primary account.

        Raises:
            PrimaryAccountNotConfigured: no account is designated primary
        """
        queryset = TreasuryAccount.objects.filter(is_primary=True)
        rows = lock_rows(queryset) if lock else list(queryset[:1])
        if not rows:
            raise PrimaryAccountNotConfigured()
        return rows[0]

    @staticmethod
    def lock_accounts(account_ids):
        """
        Lock several accounts in a stable (primary key) order.

        Returns:
            dict: account id -> TreasuryAccount

        Raises:
            TreasuryAccountNotFound: any id does not exist
        """
        ids = sorted({str(account_id) for account_id in account_ids})
        try:
            queryset = TreasuryAccount.objects.filter(pk__in=ids).order_by('pk')
            accounts = {str(account.pk): account for account in lock_rows(queryset)}
        except ValidationError:
            accounts = {}

        for account_id in ids:
            if account_id not in accounts:
                raise TreasuryAccountNotFound(account_id)
        return accounts

    # =============================================================================
    # BALANCE UPDATES
    # =============================================================================

    @staticmethod
    def adjust_balance(account_id, delta, recorded_by=None):
        """
        Apply a signed change to an account balance.

        Must run inside the caller's atomic block, after the row is locked.

        Returns:
            int: number of rows updated (0 when the account no longer exists)
        """
        delta = Decimal(delta)
        updated = TreasuryAccount.objects.filter(pk=account_id).update(
            balance=F('balance') + delta,
            last_updated_by_id=get_actor_id(recorded_by),
        )
        if not updated:
            logger.warning(f"Balance change of {delta} skipped: treasury account {account_id} no longer exists")
        return updated

    # =============================================================================
    # ACCOUNT LIFECYCLE
    # =============================================================================

    @staticmethod
    @transaction.atomic
    def create_account(bank_name, account_number, account_type, account_holder_names=None,
                       opening_balance=0, is_primary=False, recorded_by=None):
        """
        Open a treasury account.

        A non-zero opening balance is written to the ledger as an
        ``opening_balance`` entry so the account stays reconciled.

        Returns:
            TreasuryAccount
        """
        from ledger.models import LedgerEntry

        opening = Decimal('0.00')
        if opening_balance:
            raw = str(opening_balance).strip()
            opening = to_money(raw.lstrip('-'), 'opening_balance', allow_zero=True)
            if raw.startswith('-'):
                opening = -opening

        account = TreasuryAccount(
            bank_name=bank_name,
            account_number=account_number,
            account_type=account_type,
            account_holder_names=list(account_holder_names or []),
            is_primary=is_primary,
            last_updated_by_id=get_actor_id(recorded_by),
        )
        account.set_actor(recorded_by)
        account.full_clean(exclude=['is_primary'])
        account.save()

        if opening:
            today = get_sacco_today()
            LedgerEntry.objects.create(
                kind='DEPOSIT' if opening > 0 else 'EXPENSE',
                category=LedgerEntry.OPENING_BALANCE,
                amount=abs(opening),
                period_month=today.month,
                period_year=today.year,
                date=today,
                treasury_account=account,
                recorded_by_id=get_actor_id(recorded_by),
                remarks="Opening balance",
            )
            TreasuryAccountService.adjust_balance(account.pk, opening, recorded_by)
            account.refresh_from_db(fields=['balance'])

        return account

    @staticmethod
    @transaction.atomic
    def set_primary(account_id, recorded_by=None):
        """
        Designate the primary account.

        All flags are cleared and the chosen account is set in one atomic unit,
        so exactly one account is primary afterwards.
        """
        account = TreasuryAccountService.get_account(account_id, lock=True)

        TreasuryAccount.objects.filter(is_primary=True).update(is_primary=False)
        TreasuryAccount.objects.filter(pk=account.pk).update(
            is_primary=True,
            updated_by_id=get_actor_id(recorded_by) or account.updated_by_id,
        )
        account.refresh_from_db()

        logger.info(f"Primary treasury account set to {account}")
        return account

    @staticmethod
    @transaction.atomic
    def update_account(account_id, recorded_by=None, **fields):
        """
        Update descriptive fields.

        The balance is never edited directly; ``is_primary=True`` is routed
        through ``set_primary``.
        """
        if 'balance' in fields:
            raise ValidationError({'balance': "Balance can only change through ledger entries"})

        make_primary = fields.pop('is_primary', None)
        unknown = set(fields) - set(TreasuryAccountService.EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        account = TreasuryAccountService.get_account(account_id, lock=True)
        for name, value in fields.items():
            setattr(account, name, value)

        if make_primary is False and account.is_primary:
            account.is_primary = False

        account.set_actor(recorded_by)
        account.full_clean(exclude=['is_primary'])
        account.save()

        if make_primary:
            account = TreasuryAccountService.set_primary(account.pk, recorded_by)

        return account

    @staticmethod
    @transaction.atomic
    def delete_account(account_id):
        """
        Delete an account.

        Its ledger entries stay in the log with the account reference cleared.
        """
        account = TreasuryAccountService.get_account(account_id, lock=True)
        account.delete()
        return account
