from datetime import date
from decimal import Decimal

from django.contrib.auth.models import User

from zerobudget import accounts, assignments, budgets, categories, category_groups, transaction_lifecycle
from zerobudget.dates import MonthContext
from zerobudget.models import AccountType, CategoryBalance, CreditCardDebt

MAY_2025 = MonthContext.for_date(date(2025, 5, 20))


class BudgetFixtureMixin:
    """Budget with a checking account, a Visa card (and its payment
    category) and a Groceries category, as of 20 May 2025."""

    context = MAY_2025

    def setUp(self):
        self.user = User.objects.create_user(username="testuser", password="password")
        self.budget = budgets.create_budget(self.user, {"name": "Household"})
        self.checking = self.make_account("Checking", AccountType.CASH)
        self.visa = self.make_account("Visa", AccountType.CREDIT)
        self.visa_payment = self.visa.payment_category
        self.everyday = category_groups.create_group(self.user, {"budget_id": self.budget.pk, "name": "Everyday"})
        self.groceries = self.make_category("Groceries")

    def make_account(self, name, account_type, starting_balance=None):
        data = {"budget_id": self.budget.pk, "name": name, "account_type": account_type}
        if starting_balance is not None:
            data["starting_balance"] = Decimal(starting_balance)
        return accounts.create_account(self.user, data, self.context).account

    def make_category(self, name, group=None):
        group = group or self.everyday
        return categories.create_category(
            self.user, {"category_group_id": group.pk, "name": name}, self.context
        ).category

    def spend(self, account, day, amount, category=None, **extra):
        data = {
            "account_id": account.pk,
            "date": day,
            "amount": Decimal(amount),
            "category_id": category.pk if category else None,
        }
        data.update(extra)
        return transaction_lifecycle.create_transaction(self.user, data, self.context)

    def income(self, amount, day=date(2025, 5, 10)):
        return self.spend(self.checking, day, amount)

    def assign(self, category, amount):
        return assignments.update_category(self.user, category.pk, {"assigned": Decimal(amount)}, self.context)

    def balance(self, category, year=2025, month=5):
        return CategoryBalance.objects.get(category=category, year=year, month=month)

    def debt_for(self, tx):
        return CreditCardDebt.objects.get(transaction=tx)

    def refreshed(self, obj):
        obj.refresh_from_db()
        return obj
