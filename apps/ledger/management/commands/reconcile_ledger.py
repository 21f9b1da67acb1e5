# ledger/management/commands/reconcile_ledger.py

"""
Compare cached balances and totals with the ledger.

USAGE EXAMPLES:
===============

# Report drift only
python manage.py reconcile_ledger

# Rewrite drifted caches with the ledger values
python manage.py reconcile_ledger --fix
"""

from django.core.management.base import BaseCommand, CommandError
import logging

from ledger.services import ReconciliationService

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Check treasury balances, member lifetime deposits and investment profits against the ledger'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Rewrite drifted cached values with the ledger totals'
        )
        parser.add_argument(
            '--fail-on-drift',
            action='store_true',
            help='Exit with an error when drift is found (ignored with --fix)'
        )

    def handle(self, *args, **options):
        fix = options['fix']

        self.stdout.write(self.style.SUCCESS('=' * 80))
        self.stdout.write(self.style.SUCCESS('LEDGER RECONCILIATION'))
        self.stdout.write(self.style.SUCCESS('=' * 80))

        drifts = ReconciliationService.reconcile(fix=fix)

        if not drifts:
            self.stdout.write(self.style.SUCCESS("\n✓ All cached values match the ledger"))
            return

        for drift in drifts:
            self.stdout.write(self.style.WARNING(
                f"  - {drift['type']} {drift['label']}: cached {drift['cached']}, "
                f"ledger {drift['computed']} (difference {drift['difference']})"
            ))

        if fix:
            self.stdout.write(self.style.SUCCESS(f"\n✓ Fixed {len(drifts)} drifted value(s)"))
        else:
            self.stdout.write(self.style.WARNING(
                f"\n{len(drifts)} drifted value(s) found. Run with --fix to repair."
            ))
            if options['fail_on_drift']:
                raise CommandError(f"{len(drifts)} drifted value(s) found")
