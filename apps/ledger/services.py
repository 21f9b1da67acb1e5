# ledger/services.py

"""
Ledger Engine Services

Every money-moving operation runs as one atomic unit:
- treasury rows are locked before they are read for a decision
- balances and cached totals move through F() expressions
- a ledger entry is appended for every movement
- notifications go out only after commit

Any error raised inside an operation aborts the whole unit.
"""

from django.db import transaction
from django.db.models import F, Q, Sum
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from core.exceptions import (
    MemberNotFound,
    CategoryNotFound,
    LedgerEntryNotFound,
    InsufficientFunds,
)
from core.utils import (
    to_money,
    to_date,
    get_period,
    get_sacco_today,
    fetch_or_raise,
    lock_rows,
    format_money,
)
from utils.models import get_actor_id
from members.models import Member
from members.services import MemberService
from treasury.models import TreasuryAccount
from treasury.services import TreasuryAccountService
from notifications.dispatch import schedule_notification
from .models import LedgerEntry, Category

logger = logging.getLogger(__name__)


ENGINE_CATEGORIES = LedgerEntry.ENGINE_CATEGORIES


def _clean_category(category, category_type, subcategory=None):
    """
    Resolve a category name against the registry.

    Returns:
        tuple: (category name, subcategory or None)

    Raises:
        ValidationError: the category is missing, engine-owned, unknown,
        inactive, of the other type, or the subcategory is not allowed
    """
    name = (category or '').strip()
    if not name:
        raise ValidationError({'category': "Category is required"})
    if name in ENGINE_CATEGORIES:
        raise ValidationError({'category': f"Category '{name}' is recorded by its own operation"})

    registered = Category.objects.filter(name=name).first()
    if registered is None:
        raise ValidationError({'category': f"Unknown category '{name}'"})
    if not registered.is_active:
        raise ValidationError({'category': f"Category '{name}' is inactive"})
    if registered.category_type != category_type:
        raise ValidationError({
            'category': f"Category '{name}' is a {registered.get_category_type_display().lower()} category"
        })

    subcategory = (subcategory or '').strip() or None
    if subcategory and registered.subcategories and subcategory not in registered.subcategories:
        raise ValidationError({'subcategory': f"'{subcategory}' is not a subcategory of '{name}'"})
    return name, subcategory


# =============================================================================
# CATEGORY SERVICES
# =============================================================================

class CategoryService:
    """Maintain the income and expense category registry"""

    EDITABLE_FIELDS = ('name', 'category_type', 'subcategories', 'is_active')

    @staticmethod
    def get_category(category_id):
        return fetch_or_raise(Category, category_id, CategoryNotFound)

    @staticmethod
    def get_active_categories(category_type=None):
        """Active categories, optionally of one type"""
        queryset = Category.objects.filter(is_active=True)
        if category_type:
            queryset = queryset.filter(category_type=category_type)
        return queryset

    @staticmethod
    def _validate(category):
        category.name = (category.name or '').strip()
        category.full_clean()

    @staticmethod
    @transaction.atomic
    def create_category(name, category_type, subcategories=None, is_active=True, recorded_by=None):
        """
        Register a category.

        Returns:
            Category
        """
        category = Category(
            name=name,
            category_type=category_type,
            subcategories=list(subcategories or []),
            is_active=is_active,
        )
        category.set_actor(recorded_by)
        CategoryService._validate(category)
        category.save()

        logger.info(f"Created category {category}")
        return category

    @staticmethod
    @transaction.atomic
    def update_category(category_id, recorded_by=None, **fields):
        """
        Change a category.

        Entries already recorded keep the name they were written with.
        """
        unknown = set(fields) - set(CategoryService.EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        category = fetch_or_raise(Category, category_id, CategoryNotFound, lock=True)
        for name, value in fields.items():
            setattr(category, name, value)

        category.set_actor(recorded_by)
        CategoryService._validate(category)
        category.save()
        return category

    @staticmethod
    @transaction.atomic
    def delete_category(category_id):
        """Remove a category; its ledger entries are left as they are"""
        category = fetch_or_raise(Category, category_id, CategoryNotFound, lock=True)
        category.delete()
        logger.info(f"Deleted category {category.name}")
        return category


# =============================================================================
# DEPOSIT SERVICES
# =============================================================================

class DepositService:
    """Monthly share collection"""

    @staticmethod
    @transaction.atomic
    def process_deposit_batch(member_ids, period_month=None, period_year=None,
                              fine_payer_ids=(), remarks=None, recorded_by=None):
        """
        Collect the monthly installment from a batch of members.

        Each member pays shares x subscription per share into the primary
        account. Members listed in ``fine_payer_ids`` also settle their
        outstanding fine as a separate ``fine_payment`` entry, which does not
        count toward their lifetime deposits. The primary account balance is
        moved once for the whole batch.

        Args:
            member_ids: Members paying this period
            period_month: 1-12 (defaults to the current month)
            period_year: Defaults to the current year
            fine_payer_ids: Subset of members paying their fine as well
            remarks: Optional note stored on every entry
            recorded_by: Acting user

        Returns:
            dict: entries, total_amount, share_total, fine_total, account

        Raises:
            PrimaryAccountNotConfigured: no primary account designated
            MemberNotFound: any member id does not exist
        """
        from fines.models import FinePolicy
        from fines.services import FineService

        if not member_ids or isinstance(member_ids, (str, bytes)):
            raise ValidationError({'member_ids': "Select at least one member"})

        member_ids = list(member_ids)
        seen = set()
        unique_ids = []
        for member_id in member_ids:
            if str(member_id) not in seen:
                seen.add(str(member_id))
                unique_ids.append(member_id)
        if len(unique_ids) != len(member_ids):
            logger.warning(f"Ignored {len(member_ids) - len(unique_ids)} duplicate member(s) in deposit batch")

        month, year = get_period(period_month, period_year)
        today = get_sacco_today()
        actor_id = get_actor_id(recorded_by)
        fine_payers = {str(member_id) for member_id in (fine_payer_ids or [])}

        account = TreasuryAccountService.get_primary_account(lock=True)
        members = MemberService.lock_members(unique_ids)
        policy = FinePolicy.get_instance() if fine_payers else None

        entries = []
        share_total = Decimal('0.00')
        fine_total = Decimal('0.00')
        receipts = []

        for member_id in unique_ids:
            member = members[str(member_id)]

            share_amount = member.monthly_installment
            if share_amount <= 0:
                raise ValidationError(
                    f"Member {member.member_number} has no monthly installment to collect"
                )

            fine_amount = Decimal('0.00')
            if str(member.pk) in fine_payers:
                accrual = FineService.get_member_fine(member, policy=policy, today=today)
                fine_amount = accrual['fine']
                if fine_amount > 0:
                    entries.append(LedgerEntry.objects.create(
                        member=member,
                        kind='DEPOSIT',
                        category=LedgerEntry.FINE_PAYMENT,
                        amount=fine_amount,
                        period_month=month,
                        period_year=year,
                        date=today,
                        treasury_account=account,
                        recorded_by_id=actor_id,
                        remarks=remarks,
                    ))
                    fine_total += fine_amount

            entries.append(LedgerEntry.objects.create(
                member=member,
                kind='DEPOSIT',
                category=LedgerEntry.MONTHLY_DEPOSIT,
                amount=share_amount,
                period_month=month,
                period_year=year,
                date=today,
                treasury_account=account,
                recorded_by_id=actor_id,
                remarks=remarks,
            ))
            share_total += share_amount

            Member.objects.filter(pk=member.pk).update(
                lifetime_deposited=F('lifetime_deposited') + share_amount
            )
            receipts.append((member.pk, share_amount, fine_amount))

        total_amount = share_total + fine_total
        TreasuryAccountService.adjust_balance(account.pk, total_amount, recorded_by)
        account.refresh_from_db(fields=['balance', 'last_updated_by_id'])

        for member_pk, share_amount, fine_amount in receipts:
            body = f"Your deposit of {format_money(share_amount)} for {month:02d}/{year} has been received."
            if fine_amount > 0:
                body += f" Fine paid: {format_money(fine_amount)}."
            schedule_notification(
                [member_pk],
                "Deposit Received",
                body,
                notification_type='PAYMENT',
            )

        logger.info(
            f"Processed deposit batch for {month:02d}/{year}: {len(receipts)} member(s), "
            f"shares {share_total}, fines {fine_total} into {account}"
        )

        return {
            'entries': entries,
            'total_amount': total_amount,
            'share_total': share_total,
            'fine_total': fine_total,
            'account': account,
        }


# =============================================================================
# INCOME & EXPENSE SERVICES
# =============================================================================

class IncomeService:
    """Generic money received into a treasury account"""

    @staticmethod
    @transaction.atomic
    def add_income(amount, treasury_account_id, category, date=None, member_id=None,
                   subcategory=None, remarks=None, recorded_by=None):
        """
        Record income (donations, bank interest, manual fine collection...).

        Monthly share deposits only come from ``process_deposit_batch``.

        Returns:
            LedgerEntry
        """
        category, subcategory = _clean_category(category, 'DEPOSIT', subcategory)
        amount = to_money(amount)
        entry_date = to_date(date)
        month, year = get_period(for_date=entry_date)

        member = None
        if member_id:
            member = fetch_or_raise(Member, member_id, MemberNotFound)

        account = TreasuryAccountService.get_account(treasury_account_id, lock=True)

        entry = LedgerEntry.objects.create(
            member=member,
            kind='DEPOSIT',
            category=category,
            subcategory=subcategory,
            amount=amount,
            period_month=month,
            period_year=year,
            date=entry_date,
            treasury_account=account,
            recorded_by_id=get_actor_id(recorded_by),
            remarks=remarks,
        )
        TreasuryAccountService.adjust_balance(account.pk, amount, recorded_by)

        logger.info(f"Recorded income {category} of {amount} into {account}")
        return entry


class ExpenseService:
    """Society expenses"""

    @staticmethod
    @transaction.atomic
    def add_expense(amount, treasury_account_id, category, date=None, remarks=None,
                    subcategory=None, recorded_by=None):
        """
        Record an expense paid from a treasury account.

        The account may go negative; there is no floor check.

        Returns:
            LedgerEntry
        """
        category, subcategory = _clean_category(category, 'EXPENSE', subcategory)
        amount = to_money(amount)
        entry_date = to_date(date)
        month, year = get_period(for_date=entry_date)

        account = TreasuryAccountService.get_account(treasury_account_id, lock=True)

        entry = LedgerEntry.objects.create(
            kind='EXPENSE',
            category=category,
            subcategory=subcategory,
            amount=amount,
            period_month=month,
            period_year=year,
            date=entry_date,
            treasury_account=account,
            recorded_by_id=get_actor_id(recorded_by),
            remarks=remarks,
        )
        TreasuryAccountService.adjust_balance(account.pk, -amount, recorded_by)

        if account.balance - amount < 0:
            logger.warning(f"Expense of {amount} leaves {account} overdrawn")

        logger.info(f"Recorded expense {category} of {amount} from {account}")
        return entry


# =============================================================================
# TRANSFER SERVICES
# =============================================================================

class TransferService:
    """Move money between treasury accounts"""

    @staticmethod
    @transaction.atomic
    def transfer_balance(from_account_id, to_account_id, amount, remarks=None, recorded_by=None):
        """
        Move money from one account to another.

        One TRANSFER entry is written: ``treasury_account`` is the
        destination and ``transfer_from_account`` the source.

        Raises:
            InsufficientFunds: source balance is below the amount
        """
        if from_account_id is None or to_account_id is None:
            raise ValidationError("Both source and destination accounts are required")
        if str(from_account_id) == str(to_account_id):
            raise ValidationError("Source and destination accounts must be different")

        amount = to_money(amount)

        accounts = TreasuryAccountService.lock_accounts([from_account_id, to_account_id])
        source = accounts[str(from_account_id)]
        destination = accounts[str(to_account_id)]

        if source.balance < amount:
            logger.warning(f"Transfer of {amount} refused: {source} holds {source.balance}")
            raise InsufficientFunds(source, amount, source.balance)

        today = get_sacco_today()
        entry = LedgerEntry.objects.create(
            kind='TRANSFER',
            category=LedgerEntry.INTERNAL_TRANSFER,
            amount=amount,
            period_month=today.month,
            period_year=today.year,
            date=today,
            treasury_account=destination,
            transfer_from_account=source,
            recorded_by_id=get_actor_id(recorded_by),
            remarks=remarks or f"Transfer from {source.bank_name} to {destination.bank_name}",
        )

        TreasuryAccountService.adjust_balance(source.pk, -amount, recorded_by)
        TreasuryAccountService.adjust_balance(destination.pk, amount, recorded_by)

        logger.info(f"Transferred {amount} from {source} to {destination}")
        return entry


# =============================================================================
# REVERSAL SERVICES
# =============================================================================

class ReversalService:
    """Undo ledger entries"""

    @staticmethod
    @transaction.atomic
    def delete_ledger_entry(entry_id, recorded_by=None):
        """
        Delete an entry and invert everything it caused.

        - account balances get the opposite signed effect
        - monthly deposits come off the member's lifetime total
        - investment profit/expense entries move cumulative profit back
        - removing investment capital cancels the investment

        References that no longer exist are skipped and logged.

        Returns:
            LedgerEntry: the deleted entry (unsaved copy)
        """
        from investments.models import Investment

        entry = fetch_or_raise(LedgerEntry, entry_id, LedgerEntryNotFound, lock=True)

        # Accounts
        effects = entry.get_balance_effects()
        if effects:
            lock_rows(
                TreasuryAccount.objects.filter(pk__in=[account_id for account_id, _ in effects]).order_by('pk')
            )
        for account_id, delta in effects:
            TreasuryAccountService.adjust_balance(account_id, -delta, recorded_by)

        if entry.kind in ('DEPOSIT', 'EXPENSE', 'INVESTMENT_CAPITAL') and not entry.treasury_account_id:
            logger.warning(f"Reversal of entry {entry.pk}: account no longer exists, balance skipped")
        if entry.kind == 'TRANSFER':
            if not entry.transfer_from_account_id:
                logger.warning(f"Reversal of transfer {entry.pk}: source account no longer exists")
            if not entry.treasury_account_id:
                logger.warning(f"Reversal of transfer {entry.pk}: destination account no longer exists")

        # Member lifetime total
        if entry.is_share_deposit:
            if entry.member_id:
                Member.objects.filter(pk=entry.member_id).update(
                    lifetime_deposited=F('lifetime_deposited') - entry.amount
                )
            else:
                logger.warning(f"Reversal of deposit {entry.pk}: member no longer exists, lifetime total skipped")

        # Investment
        investment_categories = (
            LedgerEntry.INVESTMENT_CAPITAL,
            LedgerEntry.INVESTMENT_PROFIT,
            LedgerEntry.INVESTMENT_EXPENSE,
        )
        if entry.investment_id:
            rows = lock_rows(Investment.objects.filter(pk=entry.investment_id))
            investment = rows[0] if rows else None
            if investment is None:
                logger.warning(f"Reversal of entry {entry.pk}: investment no longer exists")
            elif entry.kind == 'INVESTMENT_CAPITAL':
                investment.status = 'CANCELLED'
                investment.set_actor(recorded_by)
                investment.save(update_fields=['status', 'updated_by_id', 'updated_at'])
            elif entry.category == LedgerEntry.INVESTMENT_PROFIT:
                Investment.objects.filter(pk=investment.pk).update(
                    cumulative_profit=F('cumulative_profit') - entry.amount
                )
            elif entry.category == LedgerEntry.INVESTMENT_EXPENSE:
                Investment.objects.filter(pk=investment.pk).update(
                    cumulative_profit=F('cumulative_profit') + entry.amount
                )
        elif entry.category in investment_categories:
            logger.warning(f"Reversal of entry {entry.pk}: investment no longer exists")

        entry_pk = entry.pk
        entry.delete()

        logger.info(
            f"Reversed {entry.kind} {entry.category} entry {entry_pk} of {entry.amount} "
            f"(by {get_actor_id(recorded_by) or 'system'})"
        )
        return entry


# =============================================================================
# RECONCILIATION SERVICES
# =============================================================================

class ReconciliationService:
    """Compare cached balances and totals with the ledger"""

    @staticmethod
    def compute_account_balance(account):
        """Signed sum of every ledger entry referencing the account"""
        totals = LedgerEntry.objects.aggregate(
            credits=Sum('amount', filter=Q(treasury_account=account, kind__in=['DEPOSIT', 'TRANSFER'])),
            debits=Sum('amount', filter=Q(treasury_account=account, kind__in=['EXPENSE', 'INVESTMENT_CAPITAL'])),
            transfers_out=Sum('amount', filter=Q(transfer_from_account=account, kind='TRANSFER')),
        )
        return (
            (totals['credits'] or Decimal('0.00'))
            - (totals['debits'] or Decimal('0.00'))
            - (totals['transfers_out'] or Decimal('0.00'))
        )

    @staticmethod
    def compute_member_lifetime_deposited(member):
        """Sum of the member's monthly deposit entries"""
        total = LedgerEntry.objects.filter(
            member=member,
            kind='DEPOSIT',
            category=LedgerEntry.MONTHLY_DEPOSIT,
        ).aggregate(total=Sum('amount'))['total']
        return total or Decimal('0.00')

    @staticmethod
    def compute_investment_profit(investment):
        """Profit entries minus expense entries linked to the investment"""
        totals = LedgerEntry.objects.filter(investment=investment).aggregate(
            profit=Sum('amount', filter=Q(category=LedgerEntry.INVESTMENT_PROFIT)),
            expense=Sum('amount', filter=Q(category=LedgerEntry.INVESTMENT_EXPENSE)),
        )
        return (totals['profit'] or Decimal('0.00')) - (totals['expense'] or Decimal('0.00'))

    @staticmethod
    @transaction.atomic
    def reconcile(fix=False):
        """
        Find cached values that drifted from the ledger.

        Args:
            fix: Rewrite drifted caches with the ledger value

        Returns:
            list: dicts with type, id, label, cached, computed, difference
        """
        from investments.models import Investment

        drifts = []

        def check(kind, queryset, cached_field, compute):
            rows = lock_rows(queryset.order_by('pk')) if fix else queryset.order_by('pk')
            for obj in rows:
                cached = getattr(obj, cached_field)
                computed = compute(obj)
                if cached != computed:
                    drifts.append({
                        'type': kind,
                        'id': obj.pk,
                        'label': str(obj),
                        'cached': cached,
                        'computed': computed,
                        'difference': cached - computed,
                    })
                    logger.warning(f"{kind} {obj} drifted: cached {cached}, ledger {computed}")
                    if fix:
                        type(obj).objects.filter(pk=obj.pk).update(**{cached_field: computed})

        check('account', TreasuryAccount.objects.all(), 'balance',
              ReconciliationService.compute_account_balance)
        check('member', Member.objects.all(), 'lifetime_deposited',
              ReconciliationService.compute_member_lifetime_deposited)
        check('investment', Investment.objects.all(), 'cumulative_profit',
              ReconciliationService.compute_investment_profit)

        if drifts and fix:
            logger.info(f"Reconciliation fixed {len(drifts)} drifted value(s)")
        return drifts
