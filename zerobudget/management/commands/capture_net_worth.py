from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from zerobudget import net_worth


class Command(BaseCommand):
    help = 'Stores a net worth snapshot for every budget with an open account'

    def add_arguments(self, parser):
        parser.add_argument('--date', help='Any day of the month to snapshot, YYYY-MM-DD (defaults to today)')

    def handle(self, *args, **options):
        on = timezone.localdate()
        if options.get('date'):
            try:
                on = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date {options['date']!r}, expected YYYY-MM-DD")

        count = net_worth.snapshot_all(on)
        month = net_worth.first_of_month(on).isoformat()
        self.stdout.write(self.style.SUCCESS(f'Saved net worth for {count} budget(s) as of {month}'))
