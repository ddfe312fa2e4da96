"""
Management command to delete expired e-mail verification codes.

Usage: python manage.py purge_verification_codes [--dry-run]

Meant to run periodically (cron), so the VerificationCode table only holds
codes that can still be used.
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from wall.identity import purge_expired_codes
from wall.models import VerificationCode


class Command(BaseCommand):
    help = 'Delete expired e-mail verification codes'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only report how many codes would be deleted'
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            expired = VerificationCode.objects.filter(expires_at__lt=timezone.now()).count()
            self.stdout.write(f'{expired} expired codes would be deleted')
            return

        deleted = purge_expired_codes()
        self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} expired codes'))
