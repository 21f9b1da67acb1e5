# fines/utils.py

"""
Fine Accrual Calculations

Pure functions with NO side effects (no database access):
- Overdue month detection
- Escalating late-payment fine
"""

from dateutil.relativedelta import relativedelta
from decimal import Decimal, ROUND_HALF_UP
from datetime import date
import logging

from core.exceptions import InvalidPolicy
from members.utils import calculate_monthly_installment

logger = logging.getLogger(__name__)


def first_of_month(value):
    return date(value.year, value.month, 1)


def full_months_between(start, end):
    """Number of whole calendar months from start to end (0 if end <= start)"""
    if end <= start:
        return 0
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months


def iter_due_months(joining_date, today):
    """
    Yield the first day of every month that has fallen due.

    Starts from the month after joining and stops before the current month.
    """
    month = first_of_month(joining_date) + relativedelta(months=1)
    current = first_of_month(today)
    while month < current:
        yield month
        month += relativedelta(months=1)


def validate_policy(policy):
    """
    Read grace period and percentage from a policy.

    Raises:
        InvalidPolicy: a field is missing or negative
    """
    if policy is None:
        raise InvalidPolicy("No fine policy supplied")

    grace = getattr(policy, 'grace_period_months', None)
    percentage = getattr(policy, 'fine_percentage', None)

    if grace is None:
        raise InvalidPolicy("Fine policy is missing the grace period")
    if percentage is None:
        raise InvalidPolicy("Fine policy is missing the fine percentage")

    try:
        grace = int(grace)
        percentage = Decimal(str(percentage))
    except (TypeError, ValueError, ArithmeticError):
        raise InvalidPolicy(f"Fine policy values are not numeric: {grace!r}, {percentage!r}")

    if grace < 0 or percentage < 0:
        raise InvalidPolicy("Fine policy values cannot be negative")
    return grace, percentage


def calculate_fine(member, policy, total_reductions, today=None):
    """
    Compute a member's outstanding late-payment fine.

    Every due month that finished more than ``grace_period_months`` full
    months ago contributes ``months_ago x monthly fine rate``; older arrears
    weigh more. Waivers and fine payments already recorded are subtracted
    from the rounded gross.

    Args:
        member: object with shares, monthly_subscription_per_share, joining_date
        policy: object with grace_period_months, fine_percentage
        total_reductions: sum of fine_waiver and fine_payment entries
        today: date to evaluate at (defaults to the society's today)

    Returns:
        dict: fine, months, total_reduced, gross_fine
    """
    grace, percentage = validate_policy(policy)

    if today is None:
        from core.utils import get_sacco_today
        today = get_sacco_today()

    reductions = Decimal(str(total_reductions or 0))
    installment = calculate_monthly_installment(member.shares, member.monthly_subscription_per_share)
    monthly_fine_rate = installment * percentage / Decimal('100')

    gross = Decimal('0')
    overdue_months = 0

    if member.joining_date:
        for month in iter_due_months(member.joining_date, today):
            month_end = month + relativedelta(months=1)
            months_ago = full_months_between(month_end, today)
            if months_ago > grace:
                gross += months_ago * monthly_fine_rate
                overdue_months += 1

    rounded_gross = gross.quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    fine = max(Decimal('0'), rounded_gross - reductions)

    return {
        'fine': fine,
        'months': overdue_months,
        'total_reduced': reductions,
        'gross_fine': rounded_gross,
    }
