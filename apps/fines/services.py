# fines/services.py

"""
Fine Services

- Fine lookup for a member (policy + recorded reductions)
- Fine waivers
- Fine policy maintenance
"""

from django.db import transaction
from django.db.models import Sum
from decimal import Decimal
import logging

from core.exceptions import MemberNotFound
from core.utils import to_money, get_sacco_today, fetch_or_raise
from utils.models import get_actor_id
from .models import FinePolicy
from .utils import calculate_fine, validate_policy

logger = logging.getLogger(__name__)


# =============================================================================
# FINE SERVICES
# =============================================================================

class FineService:
    """Fine accrual lookups and waivers"""

    @staticmethod
    def get_total_reductions(member):
        """Sum of the member's fine waivers and fine payments"""
        from ledger.models import LedgerEntry

        total = LedgerEntry.objects.filter(
            member=member,
            category__in=LedgerEntry.FINE_REDUCTION_CATEGORIES,
        ).aggregate(total=Sum('amount'))['total']
        return total or Decimal('0.00')

    @staticmethod
    def get_member_fine(member, policy=None, today=None):
        """
        Current fine accrual for a member.

        Loads the fine policy when none is passed.

        Returns:
            dict: fine, months, total_reduced, gross_fine
        """
        if policy is None:
            policy = FinePolicy.get_instance()
        return calculate_fine(
            member,
            policy,
            FineService.get_total_reductions(member),
            today=today,
        )

    @staticmethod
    @transaction.atomic
    def record_fine_waiver(member_id, amount, remarks=None, recorded_by=None):
        """
        Forgive part of a member's fine.

        Writes an ADJUSTMENT entry; no treasury balance changes.

        Returns:
            LedgerEntry
        """
        from members.models import Member
        from ledger.models import LedgerEntry

        amount = to_money(amount)
        member = fetch_or_raise(Member, member_id, MemberNotFound)
        today = get_sacco_today()

        entry = LedgerEntry.objects.create(
            member=member,
            kind='ADJUSTMENT',
            category=LedgerEntry.FINE_WAIVER,
            amount=amount,
            period_month=today.month,
            period_year=today.year,
            date=today,
            recorded_by_id=get_actor_id(recorded_by),
            remarks=remarks,
        )

        logger.info(f"Waived fine of {amount} for member {member.member_number}")
        return entry


class FinePolicyService:
    """Maintain the singleton fine policy"""

    @staticmethod
    @transaction.atomic
    def upsert_policy(grace_period_months, fine_percentage, recorded_by=None):
        """
        Create or replace the fine policy.

        Raises:
            InvalidPolicy: a field is missing or negative
        """
        candidate = FinePolicy(
            grace_period_months=grace_period_months,
            fine_percentage=fine_percentage,
        )
        grace, percentage = validate_policy(candidate)

        policy = FinePolicy.get_instance()
        policy.grace_period_months = grace
        policy.fine_percentage = percentage
        policy.last_updated_by_id = get_actor_id(recorded_by)
        policy.set_actor(recorded_by)
        policy.save()

        logger.info(f"Fine policy updated: grace={grace} month(s), rate={percentage}%")
        return policy
