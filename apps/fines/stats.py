# fines/stats.py

"""
Fine statistics: defaulter list and totals.
"""

from django.db.models import Sum
from decimal import Decimal
import logging

from core.utils import get_sacco_today
from .models import FinePolicy
from .utils import calculate_fine

logger = logging.getLogger(__name__)


def get_defaulter_list(today=None):
    """
    Active members with an outstanding fine, largest first.

    The policy is loaded once and reductions are summed in one query.

    Returns:
        list: dicts with member details and the fine accrual
    """
    from members.models import Member
    from ledger.models import LedgerEntry

    today = today or get_sacco_today()
    policy = FinePolicy.get_instance()

    reductions = dict(
        LedgerEntry.objects
        .filter(category__in=LedgerEntry.FINE_REDUCTION_CATEGORIES, member__isnull=False)
        .values('member_id')
        .annotate(total=Sum('amount'))
        .values_list('member_id', 'total')
    )

    defaulters = []
    for member in Member.get_active_members():
        accrual = calculate_fine(member, policy, reductions.get(member.pk, Decimal('0.00')), today=today)
        if accrual['fine'] > 0:
            defaulters.append({
                'member_id': member.pk,
                'member_number': member.member_number,
                'full_name': member.full_name,
                'branch': member.branch,
                'shares': member.shares,
                **accrual,
            })

    defaulters.sort(key=lambda row: row['fine'], reverse=True)
    logger.debug(f"Defaulter list: {len(defaulters)} member(s) with outstanding fines")
    return defaulters


def get_fine_summary(today=None):
    """Total outstanding fines across active members"""
    defaulters = get_defaulter_list(today=today)
    return {
        'defaulter_count': len(defaulters),
        'total_outstanding': sum((row['fine'] for row in defaulters), Decimal('0.00')),
        'total_overdue_months': sum(row['months'] for row in defaulters),
    }
