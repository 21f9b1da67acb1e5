# notifications/management/commands/send_monthly_summaries.py

"""
Send every active member their monthly financial summary.

Meant to run from cron on the first day of each month:

    0 0 1 * * python manage.py send_monthly_summaries
"""

from django.core.management.base import BaseCommand
import logging

from core.utils import format_money, get_sacco_today
from members.models import Member
from fines.models import FinePolicy
from fines.services import FineService
from notifications.dispatch import notify

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Notify active members of their shares, lifetime deposits and current fine'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show the summaries without sending them'
        )

    def handle(self, *args, **options):
        today = get_sacco_today()
        policy = FinePolicy.get_instance()
        title = f"Financial Summary - {today.strftime('%B %Y')}"

        sent = 0
        failed = 0
        for member in Member.get_active_members():
            try:
                accrual = FineService.get_member_fine(member, policy=policy, today=today)
                body = (
                    f"Hello {member.full_name},\n"
                    f"Total shares: {member.shares}\n"
                    f"Total deposited: {format_money(member.lifetime_deposited)}\n"
                    f"Outstanding fine: {format_money(accrual['fine'])}"
                )
                if options['dry_run']:
                    self.stdout.write(f"\n[{member.member_number}]\n{body}")
                    continue
                notify([member.pk], title, body, notification_type='GENERAL')
                sent += 1
            except Exception as e:
                failed += 1
                logger.error(f"Monthly summary failed for {member.member_number}: {e}", exc_info=True)
                self.stderr.write(self.style.ERROR(f"✗ {member.member_number}: {e}"))

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('\nDRY RUN - nothing was sent'))
            return

        self.stdout.write(self.style.SUCCESS(f"✓ Sent {sent} monthly summaries"))
        if failed:
            self.stdout.write(self.style.ERROR(f"Failed: {failed}"))
