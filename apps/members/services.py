# members/services.py

"""
Member Registry Services

Administrative member operations. Deposits never pass through here: the
ledger services own ``lifetime_deposited``.
"""

from django.db import transaction
from django.core.exceptions import ValidationError
import logging

from core.exceptions import MemberNotFound
from core.utils import to_money, get_sacco_today, fetch_or_raise, lock_rows
from utils.models import get_actor_id
from .models import Member

logger = logging.getLogger(__name__)


# =============================================================================
# MEMBER SERVICES
# =============================================================================

class MemberService:
    """Register and maintain society members"""

    EDITABLE_FIELDS = ('full_name', 'email', 'phone', 'branch', 'national_id')

    @staticmethod
    def get_member(member_id, lock=False):
        """
        Fetch a member or raise MemberNotFound.

        Args:
            member_id: Member primary key
            lock: Take a row lock (caller must be inside an atomic block)
        """
        return fetch_or_raise(Member, member_id, MemberNotFound, lock=lock)

    @staticmethod
    def lock_members(member_ids):
        """
        Lock several members in primary key order.

        Must run inside the caller's atomic block.

        Returns:
            dict: str(member id) -> Member

        Raises:
            MemberNotFound: any id is malformed or does not exist
        """
        keys = {}
        for member_id in member_ids:
            try:
                keys[str(member_id)] = Member._meta.pk.to_python(member_id)
            except ValidationError:
                raise MemberNotFound(member_id)

        queryset = Member.objects.filter(pk__in=list(keys.values())).order_by('pk')
        members = {str(member.pk): member for member in lock_rows(queryset)}

        for raw_id, key in keys.items():
            if str(key) not in members:
                raise MemberNotFound(raw_id)
        return {raw_id: members[str(key)] for raw_id, key in keys.items()}

    @staticmethod
    @transaction.atomic
    def register_member(full_name, national_id, joining_date=None, shares=1,
                        monthly_subscription_per_share=None, email=None, phone=None,
                        branch=None, recorded_by=None):
        """
        Register a new member.

        Returns:
            Member: the saved member with a generated member number
        """
        member = Member(
            full_name=full_name,
            national_id=national_id,
            joining_date=joining_date or get_sacco_today(),
            shares=shares,
            email=email,
            phone=phone,
            branch=branch,
        )
        if monthly_subscription_per_share is not None:
            member.monthly_subscription_per_share = to_money(
                monthly_subscription_per_share, 'monthly_subscription_per_share', allow_zero=True
            )
        member.set_actor(recorded_by)
        member.full_clean(exclude=['member_number'])
        member.save()
        return member

    @staticmethod
    @transaction.atomic
    def update_member(member_id, shares=None, monthly_subscription_per_share=None,
                      recorded_by=None, **fields):
        """
        Update shareholding and descriptive fields.

        ``lifetime_deposited`` and ``status`` cannot be changed here.
        """
        member = MemberService.get_member(member_id, lock=True)

        unknown = set(fields) - set(MemberService.EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        for name, value in fields.items():
            setattr(member, name, value)

        if shares is not None:
            member.shares = int(shares)
        if monthly_subscription_per_share is not None:
            member.monthly_subscription_per_share = to_money(
                monthly_subscription_per_share, 'monthly_subscription_per_share', allow_zero=True
            )

        member.set_actor(recorded_by)
        member.full_clean()
        member.save()

        logger.info(
            f"Updated member {member.member_number}: shares={member.shares}, "
            f"rate={member.monthly_subscription_per_share}"
        )
        return member

    @staticmethod
    @transaction.atomic
    def set_status(member_id, status, recorded_by=None):
        """Activate or deactivate a member"""
        valid = dict(Member.STATUS_CHOICES)
        if status not in valid:
            raise ValidationError({'status': f"Invalid status: {status}"})

        member = MemberService.get_member(member_id, lock=True)
        member.status = status
        member.set_actor(recorded_by)
        member.save(update_fields=['status', 'updated_by_id', 'updated_at'])
        return member

    @staticmethod
    @transaction.atomic
    def delete_member(member_id, recorded_by=None):
        """
        Permanently remove a member from the registry.

        Ledger entries stay in the log with the member reference cleared;
        the member's notifications are removed with them.

        Returns:
            Member: the deleted member (unsaved copy)
        """
        member = MemberService.get_member(member_id, lock=True)
        member_number = member.member_number
        entry_count = member.ledger_entries.count()

        member.delete()

        logger.warning(
            f"Deleted member {member_number} ({entry_count} ledger entr{'y' if entry_count == 1 else 'ies'} kept) "
            f"by {get_actor_id(recorded_by) or 'system'}"
        )
        return member
