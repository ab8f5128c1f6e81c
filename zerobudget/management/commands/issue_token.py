from django.contrib.auth.models import User
from django.core.management.base import BaseCommand

from zerobudget.auth import issue_token


class Command(BaseCommand):
    help = 'Creates an API bearer token for a user, creating the user if needed'

    def add_arguments(self, parser):
        parser.add_argument('username')
        parser.add_argument('--name', default='', help='Label for the token')

    def handle(self, *args, **options):
        user, created = User.objects.get_or_create(username=options['username'])
        if created:
            user.set_unusable_password()
            user.save()
            self.stdout.write(self.style.SUCCESS(f'Created user: {user.username}'))

        token = issue_token(user, name=options['name'])
        self.stdout.write(token.key)
