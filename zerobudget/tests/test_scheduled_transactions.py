from datetime import date
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from zerobudget import accounts, budgets, categories, category_groups, scheduled_transactions
from zerobudget.models import AccountType, Payee, ScheduledTransaction, ScheduleFrequency, Transaction

from .base import BudgetFixtureMixin

# 20 May 2025 is a Tuesday
TUESDAY = 2


class ScheduleDueTests(SimpleTestCase):
    def schedule(self, frequency, last=None, **fields):
        return ScheduledTransaction(frequency=frequency, last_created_date=last, **fields)

    def test_weekday_numbering_starts_on_sunday(self):
        self.assertEqual(scheduled_transactions.sunday_based_weekday(date(2025, 5, 18)), 0)
        self.assertEqual(scheduled_transactions.sunday_based_weekday(date(2025, 5, 20)), TUESDAY)
        self.assertEqual(scheduled_transactions.sunday_based_weekday(date(2025, 5, 24)), 6)

    def test_once_is_due_on_its_date_until_posted(self):
        once = self.schedule(ScheduleFrequency.ONCE, specific_date=date(2025, 5, 20))

        self.assertTrue(scheduled_transactions.is_due(once, date(2025, 5, 20)))
        self.assertFalse(scheduled_transactions.is_due(once, date(2025, 5, 21)))
        once.last_created_date = date(2025, 5, 20)
        self.assertFalse(scheduled_transactions.is_due(once, date(2025, 5, 20)))

    def test_monthly_posts_once_per_month(self):
        rent = self.schedule(ScheduleFrequency.MONTHLY, last=date(2025, 4, 15), day_of_month=15)

        self.assertTrue(scheduled_transactions.is_due(rent, date(2025, 5, 15)))
        self.assertFalse(scheduled_transactions.is_due(rent, date(2025, 5, 16)))
        rent.last_created_date = date(2025, 5, 15)
        self.assertFalse(scheduled_transactions.is_due(rent, date(2025, 5, 15)))

    def test_weekly_needs_a_week_since_last_post(self):
        weekly = self.schedule(ScheduleFrequency.WEEKLY, last=date(2025, 5, 13), day_of_week=TUESDAY)

        self.assertTrue(scheduled_transactions.is_due(weekly, date(2025, 5, 20)))
        self.assertFalse(scheduled_transactions.is_due(weekly, date(2025, 5, 19)))
        weekly.last_created_date = date(2025, 5, 14)
        self.assertFalse(scheduled_transactions.is_due(weekly, date(2025, 5, 20)))

    def test_biweekly_skips_alternate_weeks(self):
        biweekly = self.schedule(ScheduleFrequency.BIWEEKLY, last=date(2025, 5, 13), day_of_week=TUESDAY)

        self.assertFalse(scheduled_transactions.is_due(biweekly, date(2025, 5, 20)))
        biweekly.last_created_date = date(2025, 5, 6)
        self.assertTrue(scheduled_transactions.is_due(biweekly, date(2025, 5, 20)))

    def test_yearly_posts_once_per_year(self):
        yearly = self.schedule(
            ScheduleFrequency.YEARLY, last=date(2024, 5, 20), day_of_month=20, month_of_year=5
        )

        self.assertTrue(scheduled_transactions.is_due(yearly, date(2025, 5, 20)))
        self.assertFalse(scheduled_transactions.is_due(yearly, date(2025, 6, 20)))
        yearly.last_created_date = date(2025, 5, 20)
        self.assertFalse(scheduled_transactions.is_due(yearly, date(2025, 5, 20)))


class ScheduleCrudTests(BudgetFixtureMixin, TestCase):
    def create(self, **data):
        payload = {
            "budget_id": self.budget.pk,
            "account_id": self.checking.pk,
            "category_id": self.groceries.pk,
            "payee": "Farm Box",
            "amount": Decimal("-40.00"),
            "frequency": ScheduleFrequency.MONTHLY,
            "day_of_month": 15,
        }
        payload.update(data)
        return scheduled_transactions.create_schedule(self.user, payload)

    def test_create_monthly_schedule(self):
        schedule = self.create()

        self.assertEqual(schedule.account, self.checking)
        self.assertEqual(schedule.category, self.groceries)
        self.assertTrue(schedule.is_active)
        self.assertEqual(list(scheduled_transactions.list_for_budget(self.user, self.budget.pk)), [schedule])
        self.assertEqual(list(scheduled_transactions.list_for_account(self.user, self.visa.pk)), [])

    def test_frequency_needs_its_day_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            self.create(frequency=ScheduleFrequency.YEARLY, day_of_month=None)

        self.assertEqual(set(ctx.exception.message_dict), {"day_of_month", "month_of_year"})

    def test_account_must_belong_to_budget(self):
        other = budgets.create_budget(self.user, {"name": "Side"})
        savings = accounts.create_account(
            self.user, {"budget_id": other.pk, "name": "Savings", "account_type": AccountType.CASH}, self.context
        ).account

        with self.assertRaises(ValidationError) as ctx:
            self.create(account_id=savings.pk)

        self.assertIn("account_id", ctx.exception.message_dict)

    def test_category_must_belong_to_budget(self):
        other = budgets.create_budget(self.user, {"name": "Side"})
        group = category_groups.create_group(self.user, {"budget_id": other.pk, "name": "Bills"})
        power = categories.create_category(
            self.user, {"category_group_id": group.pk, "name": "Power"}, self.context
        ).category

        with self.assertRaises(ValidationError):
            self.create(category_id=power.pk)

    def test_update_switches_frequency(self):
        schedule = self.create()

        with self.assertRaises(ValidationError):
            scheduled_transactions.update_schedule(
                self.user, schedule.pk, {"frequency": ScheduleFrequency.WEEKLY}
            )

        updated = scheduled_transactions.update_schedule(
            self.user,
            schedule.pk,
            {"frequency": ScheduleFrequency.WEEKLY, "day_of_week": TUESDAY, "day_of_month": None, "category_id": None},
        )

        self.assertEqual(updated.frequency, ScheduleFrequency.WEEKLY)
        self.assertIsNone(updated.day_of_month)
        self.assertIsNone(updated.category)

    def test_delete_and_other_users(self):
        schedule = self.create()
        stranger = User.objects.create_user(username="stranger", password="password")

        with self.assertRaises(ScheduledTransaction.DoesNotExist):
            scheduled_transactions.get_schedule(stranger, schedule.pk)

        scheduled_transactions.delete_schedule(self.user, schedule.pk)
        self.assertFalse(ScheduledTransaction.objects.exists())


class PostDueTests(BudgetFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.income("500")
        self.assign(self.groceries, "100")

    def schedule(self, **fields):
        values = {
            "user": self.user,
            "budget": self.budget,
            "account": self.visa,
            "category": self.groceries,
            "payee": "Farm Box",
            "amount": Decimal("-40.00"),
            "frequency": ScheduleFrequency.MONTHLY,
            "day_of_month": 15,
        }
        values.update(fields)
        return ScheduledTransaction.objects.create(**values)

    def test_due_schedule_posts_through_transaction_lifecycle(self):
        schedule = self.schedule()

        results = scheduled_transactions.post_due(date(2025, 5, 15))

        self.assertEqual(len(results), 1)
        tx = results[0].transaction
        self.assertEqual((tx.date, tx.amount, tx.memo), (date(2025, 5, 15), Decimal("-40.00"), "Scheduled transaction"))
        self.assertEqual(self.balance(self.groceries).available, Decimal("60.00"))
        self.assertEqual(self.debt_for(tx).covered_amount, Decimal("40.00"))
        self.assertEqual(self.balance(self.visa_payment).available, Decimal("40.00"))
        self.assertEqual(self.refreshed(schedule).last_created_date, date(2025, 5, 15))
        self.assertTrue(Payee.objects.filter(name="Farm Box").exists())

    def test_posting_again_the_same_day_does_nothing(self):
        self.schedule()
        scheduled_transactions.post_due(date(2025, 5, 15))

        self.assertEqual(scheduled_transactions.post_due(date(2025, 5, 15)), [])
        self.assertEqual(Transaction.objects.filter(payee="Farm Box").count(), 1)

    def test_one_time_schedule_is_switched_off(self):
        schedule = self.schedule(
            frequency=ScheduleFrequency.ONCE, day_of_month=None, specific_date=date(2025, 5, 12), memo="Deposit"
        )

        results = scheduled_transactions.post_due(date(2025, 5, 12))

        self.assertEqual(results[0].transaction.memo, "Deposit")
        self.assertFalse(self.refreshed(schedule).is_active)

    def test_inactive_schedules_and_closed_accounts_are_skipped(self):
        savings = self.make_account("Savings", AccountType.CASH)
        self.schedule(is_active=False)
        self.schedule(account=savings, category=None, amount=Decimal("25.00"))
        accounts.close_account(self.user, savings.pk, self.context)

        self.assertEqual(scheduled_transactions.post_due(date(2025, 5, 15)), [])

    def test_limited_to_one_user(self):
        self.schedule()
        other = User.objects.create_user(username="other", password="password")

        self.assertEqual(scheduled_transactions.post_due(date(2025, 5, 15), user=other), [])
        self.assertEqual(len(scheduled_transactions.post_due(date(2025, 5, 15), user=self.user)), 1)
