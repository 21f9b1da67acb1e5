# core/management/commands/initialize_society.py

"""
Initialize society data after database creation.

Creates the SaccoConfiguration and FinePolicy singletons and, optionally,
the primary treasury account.

USAGE EXAMPLES:
===============

# Defaults
python manage.py initialize_society

# Custom name, currency and fine policy
python manage.py initialize_society --name "Shapla Samity" --currency BDT --grace 2 --fine-percentage 5

# Also open the primary treasury account
python manage.py initialize_society --bank "Sonali Bank" --account-number 0012345 --opening-balance 50000

# Dry run (show what would be created)
python manage.py initialize_society --dry-run
"""

from django.core.management.base import BaseCommand, CommandError
from django.core.exceptions import ValidationError
from django.db import transaction
from decimal import Decimal
import logging

from core.exceptions import LedgerError
from core.models import SaccoConfiguration
from fines.services import FinePolicyService
from treasury.services import TreasuryAccountService

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Initialize society configuration, fine policy and the primary treasury account'

    def add_arguments(self, parser):
        parser.add_argument('--name', type=str, help='Society name')
        parser.add_argument('--currency', type=str, help='Currency code (ISO 4217)')
        parser.add_argument('--timezone', type=str, help='Operational timezone, e.g. Asia/Dhaka')

        parser.add_argument('--grace', type=int, default=None, help='Fine grace period in months')
        parser.add_argument('--fine-percentage', type=Decimal, default=None, help='Fine percentage per overdue month')

        parser.add_argument('--bank', type=str, help='Bank name of the primary account')
        parser.add_argument('--account-number', type=str, help='Primary account number')
        parser.add_argument('--account-type', type=str, default='SAVINGS', help='CURRENT, SAVINGS, FDR or DPS')
        parser.add_argument('--opening-balance', type=Decimal, default=Decimal('0'), help='Opening balance')

        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be created without actually creating it'
        )

    def handle(self, *args, **options):
        if bool(options['bank']) != bool(options['account_number']):
            raise CommandError("--bank and --account-number must be given together")

        self.stdout.write(self.style.SUCCESS('=' * 80))
        self.stdout.write(self.style.SUCCESS('SOCIETY INITIALIZATION'))
        self.stdout.write(self.style.SUCCESS('=' * 80))

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('\nDRY RUN MODE - No data will be created\n'))
            self.stdout.write(f"Configuration: name={options['name']}, currency={options['currency']}, timezone={options['timezone']}")
            self.stdout.write(f"Fine policy: grace={options['grace']}, percentage={options['fine_percentage']}")
            if options['bank']:
                self.stdout.write(f"Primary account: {options['bank']} {options['account_number']} ({options['opening_balance']})")
            return

        try:
            with transaction.atomic():
                config = SaccoConfiguration.get_instance()
                if options['name']:
                    config.society_name = options['name']
                if options['currency']:
                    config.currency_code = options['currency'].upper()
                if options['timezone']:
                    config.operational_timezone = options['timezone']
                config.full_clean()
                config.save()
                self.stdout.write(self.style.SUCCESS(f"✓ {config}"))

                policy = FinePolicyService.upsert_policy(
                    options['grace'] if options['grace'] is not None else 1,
                    options['fine_percentage'] if options['fine_percentage'] is not None else Decimal('5'),
                )
                self.stdout.write(self.style.SUCCESS(f"✓ {policy}"))

                if options['bank']:
                    account = TreasuryAccountService.create_account(
                        bank_name=options['bank'],
                        account_number=options['account_number'],
                        account_type=options['account_type'],
                        opening_balance=options['opening_balance'],
                        is_primary=True,
                    )
                    self.stdout.write(self.style.SUCCESS(f"✓ Primary account {account} ({account.balance})"))
        except (LedgerError, ValidationError) as e:
            logger.exception("Society initialization failed")
            raise CommandError(f"Initialization failed: {e}")

        self.stdout.write(self.style.SUCCESS("\n✓ Society initialized"))
