# investments/services.py

"""
Investment Services

- Funding a project from a treasury account
- Recording profit and expense outcomes
- Liquidation
- Descriptive updates

Capital, profit and liquidation movements are ledger-backed and run as one
atomic unit each.
"""

from django.db import transaction
from django.db.models import F
from django.core.exceptions import ValidationError
import logging

from core.exceptions import InvestmentNotFound, InsufficientFunds
from core.utils import to_money, to_date, get_period, get_sacco_today, fetch_or_raise, format_money
from utils.models import get_actor_id
from members.models import Member
from treasury.services import TreasuryAccountService
from ledger.models import LedgerEntry
from notifications.dispatch import schedule_notification
from .models import Investment
from .utils import delete_document_on_commit

logger = logging.getLogger(__name__)


class InvestmentService:
    """Fund, track and close investment projects"""

    OUTCOME_TYPES = ('profit', 'expense')

    @staticmethod
    def get_investment(investment_id, lock=False):
        """Fetch an investment or raise InvestmentNotFound"""
        return fetch_or_raise(Investment, investment_id, InvestmentNotFound, lock=lock)

    # =============================================================================
    # FUNDING
    # =============================================================================

    @staticmethod
    @transaction.atomic
    def fund_investment(project_name, amount, funding_account_id, date=None, remarks=None,
                        legal_document=None, recorded_by=None):
        """
        Create an investment and draw its capital from a treasury account.

        Args:
            project_name: Project name
            amount: Capital to invest
            funding_account_id: Treasury account paying the capital
            date: Investment date (defaults to today)
            remarks: Optional description
            legal_document: Uploaded file or stored file name
            recorded_by: Acting user

        Returns:
            Investment

        Raises:
            InsufficientFunds: account balance is below the capital
        """
        project_name = (project_name or '').strip()
        if not project_name:
            raise ValidationError({'project_name': "Project name is required"})

        amount = to_money(amount)
        investment_date = to_date(date)
        month, year = get_period(for_date=investment_date)
        actor_id = get_actor_id(recorded_by)

        account = TreasuryAccountService.get_account(funding_account_id, lock=True)
        if account.balance < amount:
            logger.warning(
                f"Investment '{project_name}' refused: {account} holds {account.balance}, needs {amount}"
            )
            raise InsufficientFunds(account, amount, account.balance)

        investment = Investment(
            project_name=project_name,
            capital_amount=amount,
            funding_account=account,
            date=investment_date,
            recorded_by_id=actor_id,
            remarks=remarks,
        )
        if legal_document:
            investment.legal_document = legal_document
        investment.set_actor(recorded_by)
        investment.save()

        TreasuryAccountService.adjust_balance(account.pk, -amount, recorded_by)

        LedgerEntry.objects.create(
            kind='INVESTMENT_CAPITAL',
            category=LedgerEntry.INVESTMENT_CAPITAL,
            subcategory=project_name,
            amount=amount,
            period_month=month,
            period_year=year,
            date=investment_date,
            treasury_account=account,
            investment=investment,
            recorded_by_id=actor_id,
            remarks=remarks or f"Capital for {project_name}",
        )

        schedule_notification(
            list(Member.get_active_members().values_list('pk', flat=True)),
            "New Investment",
            f"The society has invested {format_money(amount)} in {project_name}.",
            notification_type='ANNOUNCEMENT',
            reference_id=investment.pk,
        )

        logger.info(f"Funded investment '{project_name}' with {amount} from {account}")
        return investment

    # =============================================================================
    # OUTCOMES
    # =============================================================================

    @staticmethod
    @transaction.atomic
    def record_investment_outcome(investment_id, amount, outcome_type, treasury_account_id,
                                  date=None, remarks=None, recorded_by=None):
        """
        Record profit earned or expense paid by an investment.

        Profit credits the account and raises cumulative profit; an expense
        debits the account and lowers it.

        Returns:
            LedgerEntry

        Raises:
            BankAccountNotFound: treasury account does not exist
            InvestmentNotFound: investment does not exist
        """
        if outcome_type not in InvestmentService.OUTCOME_TYPES:
            raise ValidationError({'outcome_type': f"Outcome must be 'profit' or 'expense', got {outcome_type!r}"})

        amount = to_money(amount)
        entry_date = to_date(date)
        month, year = get_period(for_date=entry_date)

        account = TreasuryAccountService.get_account(treasury_account_id, lock=True)
        investment = InvestmentService.get_investment(investment_id, lock=True)

        is_profit = outcome_type == 'profit'
        delta = amount if is_profit else -amount

        Investment.objects.filter(pk=investment.pk).update(
            cumulative_profit=F('cumulative_profit') + delta
        )
        TreasuryAccountService.adjust_balance(account.pk, delta, recorded_by)

        entry = LedgerEntry.objects.create(
            kind='DEPOSIT' if is_profit else 'EXPENSE',
            category=LedgerEntry.INVESTMENT_PROFIT if is_profit else LedgerEntry.INVESTMENT_EXPENSE,
            subcategory=investment.project_name,
            amount=amount,
            period_month=month,
            period_year=year,
            date=entry_date,
            treasury_account=account,
            investment=investment,
            recorded_by_id=get_actor_id(recorded_by),
            remarks=remarks,
        )

        logger.info(f"Recorded {outcome_type} of {amount} for investment '{investment.project_name}'")
        return entry

    # =============================================================================
    # LIQUIDATION
    # =============================================================================

    @staticmethod
    @transaction.atomic
    def liquidate_investment(investment_id, closing_value=None, target_account_id=None,
                             remarks=None, recorded_by=None):
        """
        Close an investment and remove it.

        With a closing value the proceeds are credited to the target account
        as an ``investment_liquidation`` entry. A closing value of zero is a
        total loss and, like an omitted value, only removes the record. The
        legal document is deleted after commit.

        Returns:
            dict: project_name, closing_value, entry
        """
        account = None
        amount = None
        if closing_value is not None:
            amount = to_money(closing_value, 'closing_value', allow_zero=True)
        if amount:
            if not target_account_id:
                raise ValidationError({'target_account_id': "A target account is required for the closing value"})
            account = TreasuryAccountService.get_account(target_account_id, lock=True)

        investment = InvestmentService.get_investment(investment_id, lock=True)
        project_name = investment.project_name

        entry = None
        if account is not None:
            today = get_sacco_today()
            TreasuryAccountService.adjust_balance(account.pk, amount, recorded_by)
            entry = LedgerEntry.objects.create(
                kind='DEPOSIT',
                category=LedgerEntry.INVESTMENT_LIQUIDATION,
                subcategory=project_name,
                amount=amount,
                period_month=today.month,
                period_year=today.year,
                date=today,
                treasury_account=account,
                investment=investment,
                recorded_by_id=get_actor_id(recorded_by),
                remarks=remarks or f"Liquidation of {project_name}",
            )

        if investment.legal_document:
            delete_document_on_commit(investment.legal_document.storage, investment.legal_document.name)

        investment.delete()

        logger.info(
            f"Liquidated investment '{project_name}'"
            + (f" for {amount} into {account}" if account is not None else "")
        )
        return {
            'project_name': project_name,
            'closing_value': amount,
            'entry': entry,
        }

    # =============================================================================
    # UPDATES
    # =============================================================================

    @staticmethod
    @transaction.atomic
    def update_investment(investment_id, project_name=None, status=None, remarks=None,
                          legal_document=None, recorded_by=None):
        """
        Change descriptive fields of an investment.

        Capital is ledger-backed and cannot be edited. A replaced legal
        document's old file is deleted after commit.
        """
        investment = InvestmentService.get_investment(investment_id, lock=True)

        if project_name is not None:
            project_name = project_name.strip()
            if not project_name:
                raise ValidationError({'project_name': "Project name cannot be empty"})
            investment.project_name = project_name

        if status is not None:
            if status not in dict(Investment.STATUS_CHOICES):
                raise ValidationError({'status': f"Invalid status: {status}"})
            investment.status = status

        if remarks is not None:
            investment.remarks = remarks

        old_document = None
        if legal_document:
            if investment.legal_document:
                old_document = (investment.legal_document.storage, investment.legal_document.name)
            investment.legal_document = legal_document

        investment.set_actor(recorded_by)
        investment.save()

        if old_document and old_document[1] != investment.legal_document.name:
            delete_document_on_commit(*old_document)

        logger.info(f"Updated investment '{investment.project_name}'")
        return investment
