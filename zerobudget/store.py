"""User-scoped reads and writes over the budgeting tables.

Every lookup takes the requesting user, so rows owned by someone else
surface as ``DoesNotExist`` exactly like rows that were never created.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import models

from .models import (
    Account,
    AccountType,
    Budget,
    Category,
    CategoryBalance,
    CategoryGroup,
    CreditCardDebt,
    Transaction,
    ZERO,
)

logger = logging.getLogger(__name__)


def get_budget(user, budget_id) -> Budget:
    return Budget.objects.get(pk=budget_id, user=user)


def lock_budget(user, budget_id) -> Budget:
    """Fetch a budget with a row lock held until the surrounding atomic block ends.

    Write paths take this lock first so that operations on one budget run
    one after another.
    """
    return Budget.objects.select_for_update().get(pk=budget_id, user=user)


def get_account(user, account_id) -> Account:
    return Account.objects.select_related("payment_category").get(pk=account_id, user=user)


def get_category_group(user, group_id) -> CategoryGroup:
    return CategoryGroup.objects.get(pk=group_id, user=user)


def get_category(user, category_id) -> Category:
    return Category.objects.select_related("category_group").get(pk=category_id, user=user)


def get_transaction(user, transaction_id, lock: bool = False) -> Transaction:
    qs = Transaction.objects.select_related("account", "account__payment_category", "category")
    if lock:
        qs = qs.select_for_update(of=("self",))
    return qs.get(pk=transaction_id, user=user)


def account_transactions(account: Account):
    return Transaction.objects.filter(account=account, user=account.user_id)


def get_category_balance(category: Category, year: int, month: int) -> CategoryBalance | None:
    return CategoryBalance.objects.filter(
        category=category, user=category.user_id, year=year, month=month
    ).first()


def previous_balance_period(budget_id, user_id, year: int, month: int) -> tuple[int, int] | None:
    row = (
        CategoryBalance.objects.filter(budget_id=budget_id, user_id=user_id)
        .filter(models.Q(year__lt=year) | models.Q(year=year, month__lt=month))
        .order_by("-year", "-month")
        .values_list("year", "month")
        .first()
    )
    return tuple(row) if row else None


def roll_over_month(budget_id, user_id, year: int, month: int) -> int:
    """Open a month that has no balance rows yet.

    Every category of the budget gets a row with zero assigned and activity
    and the available it ended the latest earlier month with, overspending
    included. Returns the number of rows created.
    """
    if CategoryBalance.objects.filter(budget_id=budget_id, user_id=user_id, year=year, month=month).exists():
        return 0

    carried = {}
    previous = previous_balance_period(budget_id, user_id, year, month)
    if previous is not None:
        carried = dict(
            CategoryBalance.objects.filter(
                budget_id=budget_id, user_id=user_id, year=previous[0], month=previous[1]
            ).values_list("category_id", "available")
        )

    rows = [
        CategoryBalance(
            user_id=user_id,
            budget_id=budget_id,
            category_id=category_id,
            year=year,
            month=month,
            available=carried.get(category_id, ZERO),
        )
        for category_id in Category.objects.filter(budget_id=budget_id, user_id=user_id).values_list("pk", flat=True)
    ]
    CategoryBalance.objects.bulk_create(rows)

    logger.info(
        "Month rolled over",
        extra={
            "budget_id": str(budget_id),
            "period": f"{year}-{month:02d}",
            "from_period": f"{previous[0]}-{previous[1]:02d}" if previous else None,
            "created_rows": len(rows),
            "action": "month_rolled_over",
            "component": "BalanceStore",
        },
    )
    return len(rows)


def get_or_create_category_balance(category: Category, year: int, month: int) -> CategoryBalance:
    """Return the locked balance row for (category, year, month).

    A month the budget has no rows in is rolled over first; a category that
    is still missing a row after that gets a zeroed one.
    """
    roll_over_month(category.budget_id, category.user_id, year, month)
    balance, _ = CategoryBalance.objects.select_for_update().get_or_create(
        category=category,
        year=year,
        month=month,
        defaults={"budget_id": category.budget_id, "user_id": category.user_id},
    )
    return balance


def category_available(category: Category, year: int, month: int) -> Decimal:
    balance = get_category_balance(category, year, month)
    return balance.available if balance else ZERO


def debt_for_transaction(transaction: Transaction) -> CreditCardDebt | None:
    return (
        CreditCardDebt.objects.select_related("payment_category", "original_category")
        .filter(transaction=transaction, user=transaction.user_id)
        .first()
    )


def debts_for_spending_category(category: Category):
    return CreditCardDebt.objects.filter(original_category=category, user=category.user_id).order_by(
        "created_at", "id"
    )


def cash_working_total(budget: Budget) -> Decimal:
    return (
        Account.objects.filter(
            budget=budget,
            user=budget.user_id,
            account_type=AccountType.CASH,
            is_active=True,
        )
        .aggregate(total=models.Sum("working_balance"))
        .get("total")
        or ZERO
    )


def latest_balance_period(budget: Budget) -> tuple[int, int] | None:
    row = (
        CategoryBalance.objects.filter(budget=budget, user=budget.user_id)
        .order_by("-year", "-month")
        .values_list("year", "month")
        .first()
    )
    return tuple(row) if row else None


def has_balances_in(budget: Budget, year: int, month: int) -> bool:
    return CategoryBalance.objects.filter(budget=budget, user=budget.user_id, year=year, month=month).exists()


def positive_available_total(budget: Budget, year: int, month: int) -> Decimal:
    return (
        CategoryBalance.objects.filter(
            budget=budget,
            user=budget.user_id,
            year=year,
            month=month,
            available__gt=0,
        )
        .aggregate(total=models.Sum("available"))
        .get("total")
        or ZERO
    )


def system_group(budget: Budget, name: str) -> CategoryGroup:
    return CategoryGroup.objects.get(budget=budget, user=budget.user_id, name=name, is_system_group=True)
