# core/exceptions.py

"""
Ledger error kinds.

Every error below is raised from inside an atomic unit, so raising it aborts
the whole operation. Missing or malformed operation fields raise Django's
own ``ValidationError`` instead, the same way model ``clean()`` methods do.
"""


class LedgerError(Exception):
    """Base class for all ledger engine errors"""


# =============================================================================
# NOT FOUND
# =============================================================================

class NotFound(LedgerError):
    """A referenced account, member, investment or entry does not exist"""

    entity = 'Record'

    def __init__(self, reference=None, message=None):
        self.reference = reference
        if message is None:
            message = f"{self.entity} not found"
            if reference is not None:
                message = f"{self.entity} '{reference}' not found"
        super().__init__(message)


class MemberNotFound(NotFound):
    entity = 'Member'


class TreasuryAccountNotFound(NotFound):
    entity = 'Treasury account'


BankAccountNotFound = TreasuryAccountNotFound


class PrimaryAccountNotConfigured(TreasuryAccountNotFound):

    def __init__(self, reference=None, message=None):
        super().__init__(
            reference,
            message or "No primary treasury account designated. Set one in Bank Management."
        )


class InvestmentNotFound(NotFound):
    entity = 'Investment'


class LedgerEntryNotFound(NotFound):
    entity = 'Ledger entry'


class CategoryNotFound(NotFound):
    entity = 'Category'


# =============================================================================
# BUSINESS RULE VIOLATIONS
# =============================================================================

class InsufficientFunds(LedgerError):
    """A debit exceeds the available balance of a treasury account"""

    def __init__(self, account, requested, available):
        self.account = account
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds in {account}. Requested: {requested}, available: {available}"
        )


class InvalidPolicy(LedgerError):
    """Fine settings are missing a required field or hold an invalid value"""


class ConcurrencyConflict(LedgerError):
    """A row lock could not be acquired; the operation may be retried"""
