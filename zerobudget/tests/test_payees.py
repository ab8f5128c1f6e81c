from datetime import date, timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from zerobudget import accounts, budgets, payees, transaction_lifecycle
from zerobudget.models import Payee

from .base import BudgetFixtureMixin


class PayeeTests(BudgetFixtureMixin, TestCase):
    def test_transaction_remembers_payee_and_category(self):
        self.spend(self.checking, date(2025, 5, 3), "-25", self.groceries, payee="Corner Shop")

        payee = Payee.objects.get(budget=self.budget)
        self.assertEqual(payee.name, "Corner Shop")
        self.assertEqual(payee.normalized_name, "corner shop")
        self.assertEqual(payee.last_category, self.groceries)
        self.assertIsNotNone(payee.last_used_at)

    def test_same_payee_in_other_case_is_not_duplicated(self):
        snacks = self.make_category("Snacks")
        self.spend(self.checking, date(2025, 5, 3), "-25", self.groceries, payee="Corner Shop")
        self.spend(self.checking, date(2025, 5, 4), "-5", snacks, payee="  corner shop ")
        self.spend(self.checking, date(2025, 5, 5), "-5", payee="CORNER SHOP")

        payee = Payee.objects.get(budget=self.budget)
        self.assertEqual(payee.name, "CORNER SHOP")
        # A use without a category keeps the last one
        self.assertEqual(payee.last_category, snacks)

    def test_blank_payee_is_not_recorded(self):
        self.income("100")

        self.assertFalse(Payee.objects.exists())

    def test_transfer_records_both_sides_as_transfer_payees(self):
        self.spend(self.checking, date(2025, 5, 6), "30", payee="Transfer : Visa")

        names = dict(Payee.objects.filter(budget=self.budget).values_list("name", "is_transfer"))
        self.assertEqual(names, {"Transfer : Visa": True, "Transfer : Checking": True})

    def test_adjustments_do_not_record_payees(self):
        self.income("100")
        self.spend(self.visa, date(2025, 5, 2), "-10")
        cleared = self.refreshed(self.checking).cleared_balance
        accounts.reconcile_account(self.user, self.checking.pk, cleared + 7, self.context)
        accounts.close_account(self.user, self.visa.pk, self.context)

        self.assertFalse(Payee.objects.exists())

    def test_updating_payee_records_new_name(self):
        result = self.spend(self.checking, date(2025, 5, 3), "-25", self.groceries, payee="Corner Shop")
        transaction_lifecycle.update_transaction(
            self.user, result.transaction.pk, {"payee": "Farm Stand"}, self.context
        )

        self.assertEqual(
            sorted(Payee.objects.values_list("name", flat=True)), ["Corner Shop", "Farm Stand"]
        )

    def test_upsert_validates_category_budget(self):
        other = budgets.create_budget(self.user, {"name": "Side"})

        with self.assertRaises(ValidationError) as ctx:
            payees.upsert(
                self.user,
                {"budget_id": other.pk, "name": "Landlord", "last_category_id": self.groceries.pk},
            )

        self.assertIn("last_category_id", ctx.exception.message_dict)

    def test_upsert_rejects_blank_name(self):
        with self.assertRaises(ValidationError):
            payees.upsert(self.user, {"budget_id": self.budget.pk, "name": "   "})

    def test_list_is_most_recently_used_first(self):
        now = timezone.now()
        Payee.objects.create(user=self.user, budget=self.budget, name="Zoo", normalized_name="zoo")
        Payee.objects.create(
            user=self.user, budget=self.budget, name="Bakery", normalized_name="bakery",
            last_used_at=now - timedelta(days=2),
        )
        Payee.objects.create(
            user=self.user, budget=self.budget, name="Aquarium", normalized_name="aquarium",
            last_used_at=now,
        )
        Payee.objects.create(user=self.user, budget=self.budget, name="Attic", normalized_name="attic")

        listed = [p.name for p in payees.list_for_budget(self.user, self.budget.pk)]

        self.assertEqual(listed, ["Aquarium", "Bakery", "Attic", "Zoo"])
