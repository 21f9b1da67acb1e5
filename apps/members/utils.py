# members/utils.py

"""
Members Utility Functions

- Member number generation
- Subscription calculations
"""

from django.db import transaction
from decimal import Decimal
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# MEMBER NUMBER GENERATION
# =============================================================================

def generate_member_number(prefix='MBR', width=4):
    """
    Generate sequential member number.

    Format: PREFIX-zero-padded number
    Example:
        MBR-0001
        MBR-0002
    """
    from members.models import Member

    with transaction.atomic():
        # Lock the table rows to prevent race conditions
        last_member = (
            Member.objects
            .select_for_update()
            .filter(member_number__startswith=f"{prefix}-")
            .order_by('-member_number')
            .first()
        )

        next_number = 1
        if last_member:
            try:
                next_number = int(last_member.member_number.split('-', 1)[1]) + 1
            except (IndexError, ValueError):
                next_number = Member.objects.filter(member_number__startswith=f"{prefix}-").count() + 1

        member_number = f"{prefix}-{str(next_number).zfill(width)}"

        logger.info(f"Generated member number: {member_number}")
        return member_number


# =============================================================================
# SUBSCRIPTION CALCULATIONS
# =============================================================================

def calculate_monthly_installment(shares, subscription_per_share):
    """
    Monthly amount due for a shareholding.

    Returns:
        Decimal: shares x subscription per share
    """
    return Decimal(shares or 0) * Decimal(str(subscription_per_share or 0))
