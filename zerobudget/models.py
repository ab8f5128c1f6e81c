from __future__ import annotations

import secrets
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


CREDIT_CARD_PAYMENTS_GROUP = "Credit Card Payments"
HIDDEN_CATEGORIES_GROUP = "Hidden Categories"

# Category id clients send for income that goes straight to Ready to Assign
READY_TO_ASSIGN = "ready-to-assign"

ZERO = Decimal("0.00")


def payment_category_name(account_name: str) -> str:
    return f"{account_name} Payment"


def generate_token_key() -> str:
    return secrets.token_hex(20)


class AccountType(models.TextChoices):
    CASH = "cash", "Cash"
    CREDIT = "credit", "Credit"
    TRACKING = "tracking", "Tracking"


class CurrencyPlacement(models.TextChoices):
    BEFORE = "before", "Before"
    AFTER = "after", "After"


class ScheduleFrequency(models.TextChoices):
    ONCE = "once", "Once"
    WEEKLY = "weekly", "Weekly"
    BIWEEKLY = "biweekly", "Every two weeks"
    MONTHLY = "monthly", "Monthly"
    YEARLY = "yearly", "Yearly"


class Budget(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="budgets")
    name = models.CharField(max_length=200)
    currency = models.CharField(max_length=3, default="USD")
    currency_placement = models.CharField(
        max_length=10,
        choices=CurrencyPlacement.choices,
        default=CurrencyPlacement.BEFORE,
    )
    number_format = models.CharField(max_length=20, default="1,234.56")
    date_format = models.CharField(max_length=20, default="MM/DD/YYYY")
    theme = models.CharField(max_length=20, default="light")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Account(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="accounts")
    name = models.CharField(max_length=200)
    account_type = models.CharField(max_length=10, choices=AccountType.choices, default=AccountType.CASH)
    starting_balance = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    cleared_balance = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    uncleared_balance = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    working_balance = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    is_active = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)
    payment_category = models.OneToOneField(
        "Category",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="payment_for_account",
        help_text="Credit accounts only: the category money is earmarked in to pay this card",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["display_order", "name"]

    def __str__(self):
        return f"{self.name} ({self.get_account_type_display()})"

    @property
    def is_credit(self) -> bool:
        return self.account_type == AccountType.CREDIT


class CategoryGroup(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="category_groups")
    name = models.CharField(max_length=200)
    display_order = models.PositiveIntegerField(default=0)
    is_system_group = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["display_order", "name"]

    def __str__(self):
        return self.name


class Category(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="categories")
    category_group = models.ForeignKey(CategoryGroup, on_delete=models.CASCADE, related_name="categories")
    name = models.CharField(max_length=200)
    display_order = models.PositiveIntegerField(default=0)
    is_credit_card_payment = models.BooleanField(default=False)
    linked_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="linked_categories",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["display_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name


class CategoryBalance(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="category_balances")
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name="balances")
    year = models.PositiveSmallIntegerField()
    month = models.PositiveSmallIntegerField()
    assigned = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    activity = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    available = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("category", "year", "month")
        ordering = ["-year", "-month"]

    def __str__(self):
        return f"{self.category} {self.year}-{self.month:02d}"


class Transaction(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="transactions")
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="transactions")
    category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.RESTRICT,
        related_name="transactions",
        help_text="Empty means income to Ready to Assign",
    )
    date = models.DateField()
    amount = models.DecimalField(max_digits=12, decimal_places=2, help_text="Signed; outflows are negative")
    memo = models.TextField(blank=True)
    payee = models.CharField(max_length=200, blank=True)
    is_cleared = models.BooleanField(default=False)
    is_reconciled = models.BooleanField(default=False)
    transfer_id = models.UUIDField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]

    def __str__(self):
        return f"{self.date} {self.payee or '-'} {self.amount:,.2f}"

    @property
    def is_credit_outflow(self) -> bool:
        return self.account.is_credit and self.amount < 0


class CreditCardDebt(models.Model):
    """One row per credit card outflow, tracking how much of it is earmarked
    in the card's payment category."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="credit_card_debts")
    transaction = models.OneToOneField(Transaction, on_delete=models.CASCADE, related_name="debt")
    credit_card_account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="debts")
    original_category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="spending_debts",
    )
    payment_category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name="payment_debts")
    debt_amount = models.DecimalField(max_digits=12, decimal_places=2)
    covered_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        verbose_name = "credit card debt"

    def __str__(self):
        return f"{self.credit_card_account.name}: {self.covered_amount:,.2f}/{self.debt_amount:,.2f}"

    @property
    def uncovered_amount(self) -> Decimal:
        return self.debt_amount - self.covered_amount


class AutoAssignItem(models.Model):
    """A single line of a named auto-assign configuration."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="auto_assign_items")
    name = models.CharField(max_length=200)
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name="auto_assign_items")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("name", "budget", "category")
        ordering = ["name", "created_at"]

    def __str__(self):
        return f"{self.name}: {self.category} ({self.amount:,.2f})"


class Payee(models.Model):
    """A name transactions have been paid to or received from, remembered per budget."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="payees")
    name = models.CharField(max_length=200)
    normalized_name = models.CharField(max_length=200)
    last_category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    last_used_at = models.DateTimeField(null=True, blank=True)
    is_transfer = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("budget", "normalized_name")
        ordering = ["name"]

    def __str__(self):
        return self.name


class ScheduledTransaction(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="scheduled_transactions")
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="scheduled_transactions")
    category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="scheduled_transactions",
    )
    payee = models.CharField(max_length=200)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    memo = models.TextField(blank=True)
    frequency = models.CharField(max_length=10, choices=ScheduleFrequency.choices, default=ScheduleFrequency.MONTHLY)
    specific_date = models.DateField(null=True, blank=True, help_text="Once only")
    day_of_month = models.PositiveSmallIntegerField(null=True, blank=True, help_text="Monthly and yearly, 1-31")
    day_of_week = models.PositiveSmallIntegerField(
        null=True, blank=True, help_text="Weekly and every two weeks, 0=Sunday to 6=Saturday"
    )
    month_of_year = models.PositiveSmallIntegerField(null=True, blank=True, help_text="Yearly only, 1-12")
    is_active = models.BooleanField(default=True)
    last_created_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["payee"]

    def __str__(self):
        return f"{self.payee} {self.amount:,.2f} ({self.get_frequency_display()})"


class NetWorthSnapshot(models.Model):
    """Assets, liabilities and net worth of a budget at the start of a month."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="net_worth_snapshots")
    month_date = models.DateField()
    total_assets = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    total_liabilities = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    net_worth = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    note = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("budget", "month_date")
        ordering = ["month_date"]

    def __str__(self):
        return f"{self.budget} {self.month_date:%Y-%m}: {self.net_worth:,.2f}"


class ApiToken(models.Model):
    key = models.CharField(max_length=64, unique=True, default=generate_token_key)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="api_tokens")
    name = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user} ({self.name or self.key[:8]})"
