from datetime import date
from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase

from zerobudget import accounts, budgets, net_worth
from zerobudget.models import AccountType, NetWorthSnapshot

from .base import BudgetFixtureMixin


class NetWorthTests(BudgetFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.income("1000")
        self.spend(self.visa, date(2025, 5, 2), "-50", self.groceries)

    def test_totals_split_assets_and_liabilities(self):
        totals = net_worth.calculate(self.budget)

        self.assertEqual(totals["total_assets"], Decimal("1000.00"))
        self.assertEqual(totals["total_liabilities"], Decimal("-50.00"))
        self.assertEqual(totals["net_worth"], Decimal("950.00"))

    def test_closed_accounts_are_left_out(self):
        savings = self.make_account("Savings", AccountType.CASH)
        self.spend(savings, date(2025, 5, 3), "200")
        accounts.close_account(self.user, savings.pk, self.context)

        self.assertEqual(net_worth.calculate(self.budget)["total_assets"], Decimal("1000.00"))

    def test_snapshot_is_stored_once_per_month(self):
        first = net_worth.take_snapshot(self.user, self.budget.pk, self.context)
        self.spend(self.checking, date(2025, 5, 4), "-100")
        second = net_worth.take_snapshot(self.user, self.budget.pk, self.context, month_date=date(2025, 5, 31))

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.month_date, date(2025, 5, 1))
        self.assertEqual(second.net_worth, Decimal("850.00"))
        self.assertEqual(NetWorthSnapshot.objects.count(), 1)

    def test_history_note_and_delete(self):
        net_worth.take_snapshot(self.user, self.budget.pk, self.context, month_date=date(2025, 5, 1))
        net_worth.take_snapshot(self.user, self.budget.pk, self.context, month_date=date(2025, 4, 10))

        net_worth.update_note(self.user, self.budget.pk, date(2025, 5, 20), "Paid the card off soon")

        history = list(net_worth.history(self.user, self.budget.pk))
        self.assertEqual([s.month_date for s in history], [date(2025, 4, 1), date(2025, 5, 1)])
        self.assertEqual(history[1].note, "Paid the card off soon")

        self.assertEqual(net_worth.delete_history(self.user, self.budget.pk), 2)
        self.assertFalse(NetWorthSnapshot.objects.exists())

    def test_note_for_missing_month(self):
        with self.assertRaises(NetWorthSnapshot.DoesNotExist):
            net_worth.update_note(self.user, self.budget.pk, date(2025, 1, 1), "nothing here")

    def test_snapshot_all_skips_budgets_without_open_accounts(self):
        other = User.objects.create_user(username="other", password="password")
        budgets.create_budget(other, {"name": "Empty"})

        self.assertEqual(net_worth.snapshot_all(date(2025, 5, 20)), 1)
        snapshot = NetWorthSnapshot.objects.get()
        self.assertEqual((snapshot.budget, snapshot.month_date), (self.budget, date(2025, 5, 1)))
