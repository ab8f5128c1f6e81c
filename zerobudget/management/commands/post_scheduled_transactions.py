from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from zerobudget import scheduled_transactions


class Command(BaseCommand):
    help = 'Creates the transactions of every active schedule that is due on the given day'

    def add_arguments(self, parser):
        parser.add_argument('--date', help='Day to post for, YYYY-MM-DD (defaults to today)')

    def handle(self, *args, **options):
        on = timezone.localdate()
        if options.get('date'):
            try:
                on = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date {options['date']!r}, expected YYYY-MM-DD")

        results = scheduled_transactions.post_due(on)
        self.stdout.write(self.style.SUCCESS(f'Posted {len(results)} scheduled transaction(s) for {on.isoformat()}'))
