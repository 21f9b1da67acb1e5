# members/stats.py

"""
Member statistics: registry overview and the personal dashboard.
"""

from django.db.models import Count, Sum, Q
from decimal import Decimal
import logging

from core.exceptions import MemberNotFound
from core.utils import fetch_or_raise, get_period, format_money

logger = logging.getLogger(__name__)


# =============================================================================
# MEMBER OVERVIEW
# =============================================================================

def get_member_statistics():
    """
    Member counts and share totals.

    Returns:
        dict: totals, by_status, by_branch
    """
    from .models import Member

    members = Member.objects.all()
    totals = members.aggregate(
        total_members=Count('id'),
        active_members=Count('id', filter=Q(status='ACTIVE')),
        total_shares=Sum('shares', filter=Q(status='ACTIVE')),
        lifetime_deposited=Sum('lifetime_deposited'),
    )

    by_branch = list(
        members.filter(status='ACTIVE')
        .values('branch')
        .annotate(count=Count('id'), shares=Sum('shares'))
        .order_by('branch')
    )

    return {
        'total_members': totals['total_members'] or 0,
        'active_members': totals['active_members'] or 0,
        'inactive_members': (totals['total_members'] or 0) - (totals['active_members'] or 0),
        'total_shares': totals['total_shares'] or 0,
        'lifetime_deposited': totals['lifetime_deposited'] or Decimal('0.00'),
        'by_branch': by_branch,
    }


# =============================================================================
# MEMBER DASHBOARD
# =============================================================================

def get_member_dashboard(member_id, today=None):
    """
    Personal dashboard figures for one member.

    Returns:
        dict: member figures, current fine accrual, this month's payment
        status and recent entries
    """
    from .models import Member
    from ledger.models import LedgerEntry
    from fines.services import FineService

    member = fetch_or_raise(Member, member_id, MemberNotFound)
    month, year = get_period(for_date=today)

    entries = LedgerEntry.objects.filter(member=member)
    deposit_stats = entries.aggregate(
        months_paid=Count('id', filter=Q(kind='DEPOSIT', category=LedgerEntry.MONTHLY_DEPOSIT)),
        fines_paid=Sum('amount', filter=Q(category=LedgerEntry.FINE_PAYMENT)),
        fines_waived=Sum('amount', filter=Q(category=LedgerEntry.FINE_WAIVER)),
    )
    paid_this_month = entries.filter(
        kind='DEPOSIT',
        category=LedgerEntry.MONTHLY_DEPOSIT,
        period_month=month,
        period_year=year,
    ).exists()

    accrual = FineService.get_member_fine(member, today=today)

    return {
        'member_id': member.pk,
        'member_number': member.member_number,
        'full_name': member.full_name,
        'shares': member.shares,
        'monthly_installment': member.monthly_installment,
        'lifetime_deposited': member.lifetime_deposited,
        'lifetime_deposited_display': format_money(member.lifetime_deposited),
        'months_paid': deposit_stats['months_paid'] or 0,
        'fines_paid': deposit_stats['fines_paid'] or Decimal('0.00'),
        'fines_waived': deposit_stats['fines_waived'] or Decimal('0.00'),
        'fine': accrual['fine'],
        'overdue_months': accrual['months'],
        'paid_this_month': paid_this_month,
        'recent_entries': list(entries.order_by('-date', '-created_at')[:5]),
    }
