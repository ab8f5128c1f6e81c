from datetime import date
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.test import TestCase

from zerobudget import (
    account_balances,
    category_activity,
    category_balances,
    debt_ledger,
    ready_to_assign,
    store,
    transaction_lifecycle,
)
from zerobudget.dates import MonthContext
from zerobudget.models import Account, AccountType, Budget, Transaction

from .base import BudgetFixtureMixin


class StoreScopingTests(BudgetFixtureMixin, TestCase):
    def test_rows_of_other_users_are_not_found(self):
        intruder = User.objects.create_user(username="intruder", password="password")

        with self.assertRaises(Budget.DoesNotExist):
            store.get_budget(intruder, self.budget.pk)
        with self.assertRaises(Account.DoesNotExist):
            store.get_account(intruder, self.checking.pk)

    def test_missing_balance_row_reads_as_zero(self):
        self.assertIsNone(store.get_category_balance(self.groceries, 2024, 1))
        self.assertEqual(store.category_available(self.groceries, 2024, 1), Decimal("0.00"))

    def test_get_or_create_balance_is_idempotent(self):
        first = store.get_or_create_category_balance(self.groceries, 2025, 7)
        second = store.get_or_create_category_balance(self.groceries, 2025, 7)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.budget_id, self.budget.pk)


class AccountBalanceTests(BudgetFixtureMixin, TestCase):
    def test_recompute_repairs_stale_balances(self):
        Transaction.objects.create(
            user=self.user,
            budget=self.budget,
            account=self.checking,
            date=date(2025, 5, 1),
            amount=Decimal("120.00"),
            is_cleared=True,
        )
        Transaction.objects.create(
            user=self.user,
            budget=self.budget,
            account=self.checking,
            date=date(2025, 5, 2),
            amount=Decimal("-20.00"),
        )

        account = account_balances.recompute(self.checking)

        self.assertEqual(account.cleared_balance, Decimal("120.00"))
        self.assertEqual(account.uncleared_balance, Decimal("-20.00"))
        self.assertEqual(account.working_balance, Decimal("100.00"))
        self.assertEqual(self.refreshed(self.checking).working_balance, Decimal("100.00"))

    def test_recompute_all_counts_accounts(self):
        self.assertEqual(account_balances.recompute_all(Account.objects.filter(budget=self.budget)), 2)


class CategoryActivityTests(BudgetFixtureMixin, TestCase):
    def test_same_month_hits_activity_and_available(self):
        category_activity.apply_delta(self.groceries, Decimal("-15"), date(2025, 5, 3), self.context)

        balance = self.balance(self.groceries)
        self.assertEqual(balance.activity, Decimal("-15.00"))
        self.assertEqual(balance.available, Decimal("-15.00"))

    def test_past_month_creates_historical_row(self):
        category_activity.apply_delta(self.groceries, Decimal("-15"), date(2024, 12, 30), self.context)

        december = self.balance(self.groceries, 2024, 12)
        self.assertEqual(december.activity, Decimal("-15.00"))
        self.assertEqual(december.available, Decimal("0.00"))
        self.assertEqual(self.balance(self.groceries).available, Decimal("-15.00"))

    def test_future_date_raises(self):
        with self.assertRaises(ValidationError):
            category_activity.apply_delta(self.groceries, Decimal("-15"), date(2025, 5, 21), self.context)

    def test_month_context_follows_the_user_calendar(self):
        # Late on 31 May for the user, already June on the server
        context = MonthContext.from_params({"userDate": "2025-05-31", "userYear": "2025", "userMonth": "5"})

        category_activity.apply_delta(self.groceries, Decimal("-5"), date(2025, 5, 31), context)

        self.assertEqual(self.balance(self.groceries).activity, Decimal("-5.00"))

    def test_bad_user_month_is_rejected(self):
        with self.assertRaises(ValidationError):
            MonthContext.from_params({"userDate": "2025-05-31", "userYear": "2025", "userMonth": "13"})
        with self.assertRaises(ValidationError):
            MonthContext.from_params({"userDate": "31/05/2025"})


class DebtLedgerTests(BudgetFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.tx = Transaction.objects.create(
            user=self.user,
            budget=self.budget,
            account=self.visa,
            category=self.groceries,
            date=date(2025, 5, 4),
            amount=Decimal("-60.00"),
        )

    def make_row(self, covered="0"):
        return debt_ledger.create(
            self.tx, self.groceries, self.visa_payment, self.visa, self.budget, Decimal("60"), Decimal(covered)
        )

    def test_covered_is_clamped_to_debt(self):
        row = self.make_row(covered="75")

        self.assertEqual(row.covered_amount, Decimal("60"))

    def test_non_positive_debt_is_refused(self):
        with self.assertRaises(ValueError):
            debt_ledger.create(
                self.tx, self.groceries, self.visa_payment, self.visa, self.budget, Decimal("0"), Decimal("0")
            )

    def test_add_coverage_stops_at_debt(self):
        row = self.make_row(covered="50")

        applied = debt_ledger.add_coverage(row, Decimal("25"))

        self.assertEqual(applied, Decimal("10"))
        row.refresh_from_db()
        self.assertEqual(row.covered_amount, Decimal("60.00"))
        self.assertEqual(debt_ledger.uncovered_for_category(self.groceries), [])

    def test_summary_by_role(self):
        self.make_row(covered="20")

        summary = debt_ledger.summary(self.groceries)
        self.assertEqual(summary["as_spending_category"]["total_debt"], Decimal("60.00"))
        self.assertEqual(summary["as_spending_category"]["total_uncovered"], Decimal("40.00"))
        self.assertEqual(summary["as_spending_category"]["debt_count"], 1)
        self.assertEqual(summary["as_payment_category"]["debt_count"], 0)

        payment_summary = debt_ledger.summary(self.visa_payment)
        self.assertEqual(payment_summary["as_payment_category"]["total_covered"], Decimal("20.00"))

    def test_delete_by_transaction(self):
        self.make_row()

        self.assertEqual(debt_ledger.delete_by_transaction(self.tx), 1)
        self.assertIsNone(store.debt_for_transaction(self.tx))


class ReadyToAssignTests(BudgetFixtureMixin, TestCase):
    def test_only_active_cash_accounts_count(self):
        self.income("800")
        self.make_account("Brokerage", AccountType.TRACKING, starting_balance="5000")
        self.spend(self.visa, date(2025, 5, 5), "-100")

        self.assertEqual(ready_to_assign.for_context(self.budget, self.context), Decimal("800.00"))

    def test_overspent_categories_are_not_subtracted(self):
        self.income("800")
        dining = self.make_category("Dining")
        self.assign(self.groceries, "100")
        self.spend(self.checking, date(2025, 5, 6), "-50", dining)

        self.assertEqual(self.balance(dining).available, Decimal("-50.00"))
        self.assertEqual(ready_to_assign.for_context(self.budget, self.context), Decimal("650.00"))

    def test_month_without_rows_uses_latest_month(self):
        self.income("800")
        self.assign(self.groceries, "300")

        self.assertEqual(ready_to_assign.calculate(self.budget, 2025, 9), Decimal("500.00"))


class MonthRolloverTests(BudgetFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.snacks = self.make_category("Snacks")
        self.income("1000")
        self.assign(self.groceries, "300")
        self.spend(self.checking, date(2025, 5, 12), "-20", self.snacks)
        self.june = MonthContext.for_date(date(2025, 6, 3))

    def spend_in_june(self, day, amount, category):
        return transaction_lifecycle.create_transaction(
            self.user,
            {"account_id": self.checking.pk, "date": day, "amount": Decimal(amount), "category_id": category.pk},
            self.june,
        )

    def test_first_write_of_a_month_carries_available_forward(self):
        self.assertEqual(ready_to_assign.for_context(self.budget, self.june), Decimal("680.00"))

        result = self.spend_in_june(date(2025, 6, 2), "-10", self.snacks)

        groceries = self.balance(self.groceries, 2025, 6)
        self.assertEqual(
            (groceries.assigned, groceries.activity, groceries.available),
            (Decimal("0.00"), Decimal("0.00"), Decimal("300.00")),
        )
        snacks = self.balance(self.snacks, 2025, 6)
        self.assertEqual(snacks.activity, Decimal("-10.00"))
        self.assertEqual(snacks.available, Decimal("-30.00"))
        self.assertEqual(result.ready_to_assign, Decimal("670.00"))

    def test_past_month_spend_lands_on_carried_available(self):
        result = self.spend_in_june(date(2025, 5, 15), "-5", self.groceries)

        may = self.balance(self.groceries)
        self.assertEqual(may.activity, Decimal("-5.00"))
        self.assertEqual(may.available, Decimal("300.00"))
        self.assertEqual(self.balance(self.groceries, 2025, 6).available, Decimal("295.00"))
        self.assertEqual(result.ready_to_assign, Decimal("680.00"))

    def test_ensure_for_month_carries_from_latest_month_with_rows(self):
        created = category_balances.ensure_for_month(self.user, self.budget.pk, 2025, 8)

        self.assertEqual(created, 3)
        august = self.balance(self.groceries, 2025, 8)
        self.assertEqual((august.assigned, august.available), (Decimal("0.00"), Decimal("300.00")))
        self.assertEqual(self.balance(self.snacks, 2025, 8).available, Decimal("-20.00"))

    def test_month_with_rows_is_not_rolled_again(self):
        self.spend_in_june(date(2025, 6, 2), "-10", self.snacks)

        self.assertEqual(store.roll_over_month(self.budget.pk, self.user.pk, 2025, 6), 0)
        self.assertEqual(self.balance(self.groceries, 2025, 6).available, Decimal("300.00"))
