# server/tenderscore/management/commands/check_tender_deadlines.py

from django.core.management.base import BaseCommand
from tenderscore.utils import close_expired_tenders


class Command(BaseCommand):
    help = 'Close open tenders whose closing date has passed'

    def handle(self, *args, **options):
        closed = close_expired_tenders()

        for tender in closed:
            self.stdout.write(
                self.style.SUCCESS(f'Successfully closed tender "{tender.tender_number}"')
            )

        if not closed:
            self.stdout.write(self.style.WARNING('No tenders to close'))
        else:
            self.stdout.write(
                self.style.SUCCESS(f'Successfully closed {len(closed)} tenders')
            )
