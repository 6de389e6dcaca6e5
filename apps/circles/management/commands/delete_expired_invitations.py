"""
Management command to sweep expired invitations.

Deletes pending invitations whose expiry time has passed. Meant to run
periodically (cron or a scheduler).

Usage:
    python manage.py delete_expired_invitations
    python manage.py delete_expired_invitations --dry-run
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.circles.models import CircleInvitation, InvitationStatus
from apps.circles.repositories import DjangoCircleRepository
from apps.circles.services import CircleService


class Command(BaseCommand):
    help = 'Delete pending invitations that are past their expiry time'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many invitations would be deleted without deleting them',
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            count = CircleInvitation.objects.filter(
                status=InvitationStatus.PENDING,
                expires_at__lt=timezone.now(),
            ).count()
            self.stdout.write(
                self.style.WARNING(f'--dry-run mode: {count} expired invitation(s) would be deleted.')
            )
            return

        service = CircleService(DjangoCircleRepository())
        deleted = service.delete_expired_invitations()

        self.stdout.write(
            self.style.SUCCESS(f'Deleted {deleted} expired invitation(s).')
        )
