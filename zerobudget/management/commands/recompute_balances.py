from django.core.management.base import BaseCommand, CommandError

from zerobudget import account_balances
from zerobudget.models import Account, Budget


class Command(BaseCommand):
    help = 'Recomputes cleared, uncleared and working balances of accounts from their transactions'

    def add_arguments(self, parser):
        parser.add_argument('--budget', help='Only recompute accounts of this budget id')

    def handle(self, *args, **options):
        accounts = Account.objects.all()
        budget_id = options.get('budget')
        if budget_id:
            if not Budget.objects.filter(pk=budget_id).exists():
                raise CommandError(f'Budget {budget_id} does not exist')
            accounts = accounts.filter(budget_id=budget_id)

        count = account_balances.recompute_all(accounts.order_by('budget_id', 'display_order'))
        self.stdout.write(self.style.SUCCESS(f'Recomputed balances for {count} account(s)'))
