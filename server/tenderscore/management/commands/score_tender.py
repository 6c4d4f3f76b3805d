# server/tenderscore/management/commands/score_tender.py

from django.core.management.base import BaseCommand, CommandError
from tenderscore.evaluation import score_tender
from tenderscore.exceptions import ScoringError
from tenderscore.models import Tender


class Command(BaseCommand):
    help = 'Score and rank the submissions of a closed tender'

    def add_arguments(self, parser):
        parser.add_argument('tender_number', help='Tender number, e.g. TND-20240101-ABCD1234')

    def handle(self, *args, **options):
        try:
            tender = Tender.objects.get(tender_number=options['tender_number'])
        except Tender.DoesNotExist:
            raise CommandError(f'Tender "{options["tender_number"]}" does not exist')

        try:
            results = score_tender(tender)
        except ScoringError as e:
            raise CommandError(f'Could not score tender {tender.tender_number}: {e}')

        vendors = dict(tender.submissions.values_list('id', 'vendor__company_name'))
        self.stdout.write(f'Tender {tender.tender_number} scored on the {tender.active_scoring_system.value} scale')

        for result in results:
            if result.rank is None:
                self.stdout.write(self.style.WARNING(f'  -  {vendors[result.submission_id]} (not eligible)'))
                continue
            self.stdout.write(
                f'  {result.rank}. {vendors[result.submission_id]}: total {result.total_score} '
                f'(price {result.price_score}, B-BBEE {result.bbbee_points}, technical {result.technical_score})'
            )

        self.stdout.write(self.style.SUCCESS(f'Scored {len(results)} submissions'))
