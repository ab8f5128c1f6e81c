import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('zerobudget', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Payee',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('normalized_name', models.CharField(max_length=200)),
                ('last_used_at', models.DateTimeField(blank=True, null=True)),
                ('is_transfer', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('budget', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payees', to='zerobudget.budget')),
                ('last_category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='zerobudget.category')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['name'],
                'unique_together': {('budget', 'normalized_name')},
            },
        ),
        migrations.CreateModel(
            name='ScheduledTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('payee', models.CharField(max_length=200)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('memo', models.TextField(blank=True)),
                ('frequency', models.CharField(choices=[('once', 'Once'), ('weekly', 'Weekly'), ('biweekly', 'Every two weeks'), ('monthly', 'Monthly'), ('yearly', 'Yearly')], default='monthly', max_length=10)),
                ('specific_date', models.DateField(blank=True, help_text='Once only', null=True)),
                ('day_of_month', models.PositiveSmallIntegerField(blank=True, help_text='Monthly and yearly, 1-31', null=True)),
                ('day_of_week', models.PositiveSmallIntegerField(blank=True, help_text='Weekly and every two weeks, 0=Sunday to 6=Saturday', null=True)),
                ('month_of_year', models.PositiveSmallIntegerField(blank=True, help_text='Yearly only, 1-12', null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('last_created_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='scheduled_transactions', to='zerobudget.account')),
                ('budget', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='scheduled_transactions', to='zerobudget.budget')),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='scheduled_transactions', to='zerobudget.category')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['payee'],
            },
        ),
        migrations.CreateModel(
            name='NetWorthSnapshot',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('month_date', models.DateField()),
                ('total_assets', models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ('total_liabilities', models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ('net_worth', models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ('note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('budget', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='net_worth_snapshots', to='zerobudget.budget')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['month_date'],
                'unique_together': {('budget', 'month_date')},
            },
        ),
    ]
