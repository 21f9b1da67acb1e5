# ledger/stats.py

"""
Society-wide ledger statistics for dashboards.
"""

from django.db.models import Sum, Count, Q
from decimal import Decimal
import calendar
import logging

from core.utils import format_money, get_sacco_today
from .models import LedgerEntry

logger = logging.getLogger(__name__)


# =============================================================================
# SOCIETY SUMMARY
# =============================================================================

def get_society_summary():
    """
    Headline figures for the society.

    Returns:
        dict: deposits, expenses, active investment capital, treasury
        balance, active member count and the latest entries
    """
    from members.models import Member
    from treasury.models import TreasuryAccount
    from investments.models import Investment

    totals = LedgerEntry.objects.aggregate(
        total_deposits=Sum('amount', filter=Q(kind='DEPOSIT')),
        share_deposits=Sum('amount', filter=Q(kind='DEPOSIT', category=LedgerEntry.MONTHLY_DEPOSIT)),
        fines_collected=Sum('amount', filter=Q(category=LedgerEntry.FINE_PAYMENT)),
        total_expenses=Sum('amount', filter=Q(kind='EXPENSE')),
    )
    active_capital = Investment.get_active_investments().aggregate(
        total=Sum('capital_amount')
    )['total'] or Decimal('0.00')
    treasury_balance = TreasuryAccount.objects.aggregate(total=Sum('balance'))['total'] or Decimal('0.00')

    summary = {key: value or Decimal('0.00') for key, value in totals.items()}
    summary.update({
        'total_investments': active_capital,
        'treasury_balance': treasury_balance,
        'treasury_balance_display': format_money(treasury_balance),
        'active_members': Member.get_active_members().count(),
        'account_count': TreasuryAccount.objects.count(),
        'recent_entries': list(
            LedgerEntry.objects.select_related('member').order_by('-date', '-created_at')[:6]
        ),
    })
    return summary


def get_branch_summary(branch):
    """Totals per entry kind for members of one branch"""
    rows = (
        LedgerEntry.objects
        .filter(member__branch=branch)
        .values('kind')
        .annotate(total_amount=Sum('amount'), count=Count('id'))
        .order_by('kind')
    )
    return {
        'branch': branch,
        'data': [
            {'kind': row['kind'], 'total_amount': row['total_amount'], 'count': row['count']}
            for row in rows
        ],
    }


# =============================================================================
# COLLECTIONS
# =============================================================================

def get_collection_trend(year=None):
    """
    Monthly share collections for a year, months without collections omitted.

    Returns:
        list: dicts with month, name, total
    """
    year = year or get_sacco_today().year
    rows = (
        LedgerEntry.objects
        .filter(kind='DEPOSIT', category=LedgerEntry.MONTHLY_DEPOSIT, period_year=year)
        .values('period_month')
        .annotate(total=Sum('amount'))
    )
    by_month = {row['period_month']: row['total'] for row in rows}

    return [
        {'month': month, 'name': calendar.month_abbr[month], 'total': by_month[month]}
        for month in range(1, 13)
        if by_month.get(month)
    ]


def get_paid_member_ids(period_month, period_year, branch=None):
    """
    Members who already paid their monthly deposit for a period.

    Returns:
        list: member ids
    """
    queryset = LedgerEntry.objects.filter(
        kind='DEPOSIT',
        category=LedgerEntry.MONTHLY_DEPOSIT,
        period_month=int(period_month),
        period_year=int(period_year),
        member__isnull=False,
    )
    if branch:
        queryset = queryset.filter(member__branch=branch)
    return list(queryset.values_list('member_id', flat=True).distinct())
