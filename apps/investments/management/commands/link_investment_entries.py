# investments/management/commands/link_investment_entries.py

"""
Link legacy investment ledger entries to their investment.

Older entries identified their project only by name (subcategory). This
command sets the investment reference wherever the name matches exactly one
investment.

USAGE EXAMPLES:
===============

python manage.py link_investment_entries --dry-run
python manage.py link_investment_entries
"""

from django.core.management.base import BaseCommand
from django.db import transaction
import logging

from investments.models import Investment
from ledger.models import LedgerEntry

logger = logging.getLogger(__name__)

INVESTMENT_CATEGORIES = (
    LedgerEntry.INVESTMENT_CAPITAL,
    LedgerEntry.INVESTMENT_PROFIT,
    LedgerEntry.INVESTMENT_EXPENSE,
    LedgerEntry.INVESTMENT_LIQUIDATION,
)


class Command(BaseCommand):
    help = 'Attach investment references to legacy entries matched by project name'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be linked without saving'
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        by_name = {}
        for investment in Investment.objects.all():
            by_name.setdefault(investment.project_name.strip().lower(), []).append(investment)

        linked = 0
        ambiguous = 0
        unmatched = 0

        with transaction.atomic():
            entries = LedgerEntry.objects.filter(
                investment__isnull=True,
                category__in=INVESTMENT_CATEGORIES,
            ).select_for_update()

            for entry in entries:
                matches = by_name.get((entry.subcategory or '').strip().lower(), [])
                if len(matches) == 1:
                    linked += 1
                    self.stdout.write(f"  {entry.category} {entry.amount} ({entry.date}) -> {matches[0].project_name}")
                    if not dry_run:
                        LedgerEntry.objects.filter(pk=entry.pk).update(investment=matches[0])
                elif matches:
                    ambiguous += 1
                    logger.warning(f"Entry {entry.pk}: '{entry.subcategory}' matches {len(matches)} investments")
                else:
                    unmatched += 1

        prefix = "Would link" if dry_run else "Linked"
        self.stdout.write(self.style.SUCCESS(f"✓ {prefix} {linked} entr{'y' if linked == 1 else 'ies'}"))
        if ambiguous:
            self.stdout.write(self.style.WARNING(f"Ambiguous names: {ambiguous}"))
        if unmatched:
            self.stdout.write(self.style.WARNING(f"No matching investment: {unmatched}"))
