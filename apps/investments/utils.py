# investments/utils.py

"""
Investment helpers

- ROI calculation
- Legal document cleanup after commit
"""

from django.db import transaction
from decimal import Decimal, ROUND_HALF_UP
import logging

logger = logging.getLogger(__name__)


def calculate_roi(net_yield, capital):
    """
    Return on investment in percent, 2 dp.

    Returns:
        Decimal: 0.00 when there is no capital
    """
    capital = Decimal(str(capital or 0))
    if not capital:
        return Decimal('0.00')
    return (Decimal(str(net_yield or 0)) / capital * 100).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def delete_document_on_commit(storage, name):
    """
    Remove a stored document once the current transaction commits.

    Storage errors are logged, never raised.
    """
    if not name:
        return

    def _delete():
        try:
            storage.delete(name)
            logger.info(f"Deleted investment document {name}")
        except Exception as e:
            logger.error(f"Could not delete investment document {name}: {e}", exc_info=True)

    transaction.on_commit(_delete)
