from datetime import date
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase

from zerobudget import accounts, budgets, categories, category_balances, category_groups
from zerobudget.exceptions import ConflictError
from zerobudget.models import (
    Account,
    AccountType,
    Category,
    CategoryBalance,
    CategoryGroup,
    CREDIT_CARD_PAYMENTS_GROUP,
    CreditCardDebt,
    HIDDEN_CATEGORIES_GROUP,
    Transaction,
)

from .base import BudgetFixtureMixin


class BudgetTests(BudgetFixtureMixin, TestCase):
    def test_new_budget_has_system_groups(self):
        groups = CategoryGroup.objects.filter(budget=self.budget, is_system_group=True)

        self.assertEqual(
            sorted(groups.values_list("name", "display_order")),
            [(CREDIT_CARD_PAYMENTS_GROUP, 999), (HIDDEN_CATEGORIES_GROUP, 1000)],
        )

    def test_budget_names_are_unique_per_user(self):
        with self.assertRaises(ConflictError):
            budgets.create_budget(self.user, {"name": "household"})

    def test_update_budget_settings(self):
        budget = budgets.update_budget(self.user, self.budget.pk, {"currency": "EUR", "theme": "dark"})

        self.assertEqual(budget.currency, "EUR")
        self.assertEqual(self.refreshed(self.budget).theme, "dark")

    def test_delete_budget_removes_everything(self):
        self.income("100")
        self.spend(self.visa, date(2025, 5, 2), "-10", self.groceries)

        budgets.delete_budget(self.user, self.budget.pk)

        self.assertFalse(Account.objects.exists())
        self.assertFalse(Transaction.objects.exists())
        self.assertFalse(CategoryBalance.objects.exists())


class AccountTests(BudgetFixtureMixin, TestCase):
    def test_credit_account_gets_payment_category(self):
        payment = self.visa_payment

        self.assertEqual(payment.name, "Visa Payment")
        self.assertTrue(payment.is_credit_card_payment)
        self.assertEqual(payment.linked_account_id, self.visa.pk)
        self.assertEqual(payment.category_group.name, CREDIT_CARD_PAYMENTS_GROUP)
        self.assertTrue(CategoryBalance.objects.filter(category=payment, year=2025, month=5).exists())

    def test_cash_account_has_no_payment_category(self):
        self.assertIsNone(self.checking.payment_category)

    def test_duplicate_account_name(self):
        with self.assertRaises(ConflictError):
            self.make_account("checking", AccountType.CASH)

    def test_renaming_card_renames_payment_category(self):
        accounts.update_account(self.user, self.visa.pk, {"name": "Chase Visa"}, self.context)

        self.assertEqual(self.refreshed(self.visa_payment).name, "Chase Visa Payment")

    def test_starting_balance_change_recomputes(self):
        self.income("100")

        result = accounts.update_account(
            self.user, self.checking.pk, {"starting_balance": Decimal("50")}, self.context
        )

        self.assertEqual(result.account.working_balance, Decimal("150.00"))
        self.assertEqual(result.ready_to_assign, Decimal("150.00"))

    def test_close_zeroes_balance_and_reopen(self):
        self.income("250")

        result = accounts.close_account(self.user, self.checking.pk, self.context)

        self.assertFalse(result.account.is_active)
        self.assertEqual(result.account.working_balance, Decimal("0.00"))
        self.assertEqual(result.adjustment_transaction.amount, Decimal("-250.00"))
        self.assertEqual(result.adjustment_transaction.payee, accounts.CLOSURE_PAYEE)

        with self.assertRaises(ConflictError):
            accounts.close_account(self.user, self.checking.pk, self.context)

        reopened = accounts.reopen_account(self.user, self.checking.pk, self.context)
        self.assertTrue(reopened.account.is_active)

    def test_closing_overpaid_card_records_no_debt(self):
        self.spend(self.visa, date(2025, 5, 2), "50")

        result = accounts.close_account(self.user, self.visa.pk, self.context)

        self.assertEqual(result.adjustment_transaction.amount, Decimal("-50.00"))
        self.assertEqual(result.account.working_balance, Decimal("0.00"))
        self.assertFalse(CreditCardDebt.objects.filter(transaction=result.adjustment_transaction).exists())
        self.assertEqual(self.balance(self.visa_payment).available, Decimal("0.00"))

    def test_reconcile_adds_adjustment_and_locks_cleared(self):
        tx = self.spend(self.checking, date(2025, 5, 2), "300", is_cleared=True).transaction
        pending = self.spend(self.checking, date(2025, 5, 3), "-40").transaction

        result = accounts.reconcile_account(self.user, self.checking.pk, Decimal("310"), self.context)

        self.assertEqual(result.adjustment_transaction.amount, Decimal("10.00"))
        self.assertEqual(result.account.cleared_balance, Decimal("310.00"))
        self.assertTrue(self.refreshed(tx).is_reconciled)
        self.assertFalse(self.refreshed(pending).is_reconciled)

    def test_reconcile_without_difference_adds_nothing(self):
        self.spend(self.checking, date(2025, 5, 2), "300", is_cleared=True)

        result = accounts.reconcile_account(self.user, self.checking.pk, Decimal("300"), self.context)

        self.assertIsNone(result.adjustment_transaction)
        self.assertEqual(Transaction.objects.count(), 1)

    def test_tracking_balance_update(self):
        brokerage = self.make_account("Brokerage", AccountType.TRACKING, starting_balance="1000")

        result = accounts.update_tracking_balance(self.user, brokerage.pk, Decimal("1250"), "", self.context)

        self.assertEqual(result.account.working_balance, Decimal("1250.00"))
        self.assertEqual(result.adjustment_transaction.amount, Decimal("250.00"))

        with self.assertRaises(ValidationError):
            accounts.update_tracking_balance(self.user, self.checking.pk, Decimal("10"), "", self.context)


class CategoryGroupTests(BudgetFixtureMixin, TestCase):
    def test_system_groups_are_protected(self):
        hidden = CategoryGroup.objects.get(budget=self.budget, name=HIDDEN_CATEGORIES_GROUP)

        with self.assertRaises(ConflictError):
            category_groups.update_group(self.user, hidden.pk, {"name": "Secret"})
        with self.assertRaises(ConflictError):
            category_groups.delete_group(self.user, hidden.pk)

    def test_hide_group_moves_its_categories(self):
        self.make_category("Snacks")

        moved = category_groups.hide_group(self.user, self.everyday.pk)

        self.assertEqual(moved, 2)
        self.assertFalse(Category.objects.filter(category_group=self.everyday).exists())

    def test_delete_group_with_transactions_conflicts(self):
        self.spend(self.checking, date(2025, 5, 2), "-5", self.groceries)

        with self.assertRaises(ConflictError):
            category_groups.delete_group(self.user, self.everyday.pk)

    def test_reorder_groups_is_idempotent(self):
        bills = category_groups.create_group(self.user, {"budget_id": self.budget.pk, "name": "Bills"})
        order = [bills.pk, self.everyday.pk]

        first = category_groups.reorder_groups(self.user, order)
        with mock.patch.object(CategoryGroup, "save") as save:
            second = category_groups.reorder_groups(self.user, order)

        save.assert_not_called()
        self.assertEqual([(g.pk, g.display_order) for g in first], [(bills.pk, 0), (self.everyday.pk, 1)])
        self.assertEqual([(g.pk, g.display_order) for g in second], [(g.pk, g.display_order) for g in first])
        self.assertEqual(self.refreshed(bills).display_order, 0)
        self.assertEqual(self.refreshed(self.everyday).display_order, 1)


class CategoryTests(BudgetFixtureMixin, TestCase):
    def test_new_category_has_zero_current_month_row(self):
        balance = self.balance(self.groceries)

        self.assertEqual(
            (balance.assigned, balance.activity, balance.available),
            (Decimal("0.00"), Decimal("0.00"), Decimal("0.00")),
        )

    def test_cannot_add_to_system_group(self):
        hidden = CategoryGroup.objects.get(budget=self.budget, name=HIDDEN_CATEGORIES_GROUP)

        with self.assertRaises(ConflictError):
            self.make_category("Secret", group=hidden)

    def test_delete_category_returns_ready_to_assign(self):
        self.income("500")
        self.assign(self.groceries, "200")

        rta = categories.delete_category(self.user, self.groceries.pk, self.context)

        self.assertEqual(rta, Decimal("500.00"))
        self.assertFalse(CategoryBalance.objects.filter(category_id=self.groceries.pk).exists())

    def test_delete_category_with_transactions_conflicts(self):
        self.spend(self.checking, date(2025, 5, 2), "-5", self.groceries)

        with self.assertRaises(ConflictError):
            categories.delete_category(self.user, self.groceries.pk, self.context)

    def test_payment_category_cannot_be_deleted_or_hidden(self):
        with self.assertRaises(ConflictError):
            categories.delete_category(self.user, self.visa_payment.pk, self.context)
        with self.assertRaises(ConflictError):
            categories.hide_category(self.user, self.visa_payment.pk, self.context)

    def test_hide_and_unhide(self):
        categories.hide_category(self.user, self.groceries.pk, self.context)
        self.assertEqual(self.refreshed(self.groceries).category_group.name, HIDDEN_CATEGORIES_GROUP)

        result = categories.unhide_category(self.user, self.groceries.pk, self.context)

        self.assertEqual(result.category.category_group_id, self.everyday.pk)
        with self.assertRaises(ConflictError):
            categories.unhide_category(self.user, self.groceries.pk, self.context)

    def test_list_for_budget_includes_month_balance(self):
        self.assign(self.groceries, "80")

        rows = categories.list_for_budget(self.user, self.budget.pk, 2025, 5)
        by_name = {row.category.name: row for row in rows}

        self.assertEqual(by_name["Groceries"].balance.assigned, Decimal("80.00"))
        self.assertIn("Visa Payment", by_name)
        self.assertIsNone(categories.list_for_budget(self.user, self.budget.pk, 2025, 8)[0].balance)

    def test_reorder_categories_is_idempotent(self):
        snacks = self.make_category("Snacks")
        order = [snacks.pk, self.groceries.pk]

        first = categories.reorder_categories(self.user, order)
        with mock.patch.object(Category, "save") as save:
            second = categories.reorder_categories(self.user, order)

        save.assert_not_called()
        self.assertEqual([(c.pk, c.display_order) for c in first], [(snacks.pk, 0), (self.groceries.pk, 1)])
        self.assertEqual([(c.pk, c.display_order) for c in second], [(c.pk, c.display_order) for c in first])
        self.assertEqual(self.refreshed(snacks).display_order, 0)
        self.assertEqual(self.refreshed(self.groceries).display_order, 1)


class CategoryBalanceTests(BudgetFixtureMixin, TestCase):
    def test_ensure_for_month_creates_missing_rows_once(self):
        created = category_balances.ensure_for_month(self.user, self.budget.pk, 2025, 6)

        self.assertEqual(created, 2)
        self.assertEqual(category_balances.ensure_for_month(self.user, self.budget.pk, 2025, 6), 0)

    def test_update_for_category_ignores_metadata(self):
        result = category_balances.update_for_category(
            self.user, self.groceries.pk, {"assigned": Decimal("40"), "name": "Ignored"}, self.context
        )

        self.assertEqual(result.balance.available, Decimal("40.00"))
        self.assertEqual(self.refreshed(self.groceries).name, "Groceries")
        self.assertEqual(
            category_balances.get_for_category(self.user, self.groceries.pk, 2025, 5).assigned,
            Decimal("40.00"),
        )
