# core/utils.py

"""
Central utilities for society operations
Prevents code duplication and ensures consistency
"""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import logging

from core.exceptions import ConcurrencyConflict

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


# =============================================================================
# CURRENCY & MONEY FORMATTING
# =============================================================================

def get_base_currency():
    """
    Get base currency from society configuration.

    Returns:
        str: Currency code (defaults to 'BDT')
    """
    try:
        from core.models import SaccoConfiguration
        config = SaccoConfiguration.get_instance()
        return config.currency_code if config else 'BDT'
    except Exception as e:
        logger.warning(f"Could not fetch currency from configuration: {e}")
        return 'BDT'


def format_money(amount, include_symbol=True):
    """
    Format money amount according to the society configuration.

    Args:
        amount: Decimal or numeric value to format
        include_symbol: Whether to include currency code

    Returns:
        str: Formatted money string
    """
    try:
        from core.models import SaccoConfiguration
        return SaccoConfiguration.get_instance().format_currency(amount, include_symbol)
    except Exception as e:
        logger.warning(f"Could not format using configuration: {e}")

    # Fallback formatting
    try:
        formatted = f"{Decimal(str(amount or 0)):,.2f}"
        return f"BDT {formatted}" if include_symbol else formatted
    except (ValueError, TypeError, InvalidOperation):
        return "BDT 0.00" if include_symbol else "0.00"


def to_money(value, field='amount', allow_zero=False):
    """
    Convert a user supplied amount into a two-place Decimal.

    Raises:
        ValidationError: value is missing, not numeric or not positive
    """
    if value is None or value == '':
        raise ValidationError({field: f"{field.replace('_', ' ').capitalize()} is required"})
    try:
        amount = Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except (ValueError, TypeError, InvalidOperation):
        raise ValidationError({field: f"Invalid {field.replace('_', ' ')}: {value}"})

    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError({field: f"{field.replace('_', ' ').capitalize()} must be greater than zero"})
    return amount


# =============================================================================
# TIMEZONE & PERIOD UTILITY FUNCTIONS
# =============================================================================

def get_sacco_timezone():
    """
    Get the society's operational timezone.

    Returns:
        ZoneInfo: operational timezone
    """
    from core.models import SaccoConfiguration, DEFAULT_TIMEZONE
    from zoneinfo import ZoneInfo
    try:
        return SaccoConfiguration.get_instance().get_timezone()
    except Exception as e:
        logger.error(f"Error getting society timezone: {e}")
        return ZoneInfo(DEFAULT_TIMEZONE)


def get_sacco_current_time():
    """Get current time in the society's operational timezone."""
    from django.utils import timezone
    return timezone.now().astimezone(get_sacco_timezone())


def get_sacco_today():
    """
    Get today's date in the society's operational timezone.

    Use this instead of date.today() for deposit periods and fine accrual.
    """
    return get_sacco_current_time().date()


def to_date(value, field='date'):
    """
    Accept a date, datetime or ISO string; missing values mean today.

    Raises:
        ValidationError: string is not a valid date
    """
    from datetime import date, datetime
    from django.utils.dateparse import parse_date

    if value in (None, ''):
        return get_sacco_today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({field: f"Invalid date: {value}"})
    return parsed


def get_period(period_month=None, period_year=None, for_date=None):
    """
    Resolve a reporting period.

    Missing parts default to the month/year of ``for_date`` (or today).

    Returns:
        tuple: (period_month, period_year)
    """
    reference = for_date or get_sacco_today()
    month = int(period_month) if period_month else reference.month
    year = int(period_year) if period_year else reference.year

    if not 1 <= month <= 12:
        raise ValidationError({'period_month': f"Invalid month: {period_month}"})
    return month, year


# =============================================================================
# ROW LOCKING
# =============================================================================

def lock_rows(queryset):
    """
    Apply ``select_for_update`` to a queryset and evaluate it.

    With ``LEDGER_LOCK_NOWAIT`` enabled a busy row fails fast instead of
    blocking, and the database error is surfaced as ConcurrencyConflict.

    Must be called inside ``transaction.atomic``.
    """
    nowait = getattr(settings, 'LEDGER_LOCK_NOWAIT', False)
    try:
        return list(queryset.select_for_update(nowait=nowait))
    except DatabaseError as e:
        logger.warning(f"Could not lock {queryset.model.__name__} rows: {e}")
        raise ConcurrencyConflict(
            f"{queryset.model._meta.verbose_name} is being updated by another operation. Please retry."
        ) from e


def fetch_or_raise(model, pk, exception, lock=False, queryset=None):
    """
    Fetch a single row by primary key or raise the given NotFound error.

    Args:
        model: Model class
        pk: Primary key value (malformed keys count as not found)
        exception: NotFound subclass to raise
        lock: Lock the row with ``lock_rows``
        queryset: Optional base queryset
    """
    if pk is None:
        raise exception(pk)

    base = queryset if queryset is not None else model.objects.all()
    try:
        filtered = base.filter(pk=pk)
    except (ValidationError, ValueError, TypeError):
        raise exception(pk)

    try:
        rows = lock_rows(filtered) if lock else list(filtered)
    except (ValidationError, ValueError, TypeError):
        raise exception(pk)

    if not rows:
        raise exception(pk)
    return rows[0]
