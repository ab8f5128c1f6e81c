from __future__ import annotations

import logging

from django.db import transaction

from . import assignments, store
from .dates import MonthContext
from .models import Category, CategoryBalance

logger = logging.getLogger(__name__)


def get_for_category(user, category_id, year: int, month: int) -> CategoryBalance | None:
    category = store.get_category(user, category_id)
    return store.get_category_balance(category, year, month)


def list_for_budget(user, budget_id, year: int, month: int):
    budget = store.get_budget(user, budget_id)
    return CategoryBalance.objects.filter(budget=budget, user=user, year=year, month=month).select_related(
        "category"
    )


def update_for_category(user, category_id, changes: dict, context: MonthContext) -> assignments.AssignmentResult:
    """Money fields go through the assignment engine so assigned and available stay linked."""
    money = {k: v for k, v in changes.items() if k in (*assignments.MONEY_FIELDS, "year", "month")}
    return assignments.update_category(user, category_id, money, context)


@transaction.atomic
def ensure_for_month(user, budget_id, year: int, month: int) -> int:
    """Create balance rows for every category of the budget missing one in this month.

    A month with no rows at all is rolled over, carrying each category's
    available forward; categories added since get zeroed rows.
    """
    budget = store.lock_budget(user, budget_id)
    rolled = store.roll_over_month(budget.pk, user.pk, year, month)
    existing = set(
        CategoryBalance.objects.filter(budget=budget, year=year, month=month).values_list("category_id", flat=True)
    )
    missing = [
        CategoryBalance(user=user, budget=budget, category=category, year=year, month=month)
        for category in Category.objects.filter(budget=budget, user=user)
        if category.pk not in existing
    ]
    CategoryBalance.objects.bulk_create(missing)
    logger.info(
        "Category balances ensured",
        extra={
            "budget_id": str(budget.pk),
            "year": year,
            "month": month,
            "created_rows": rolled + len(missing),
            "action": "category_balances_ensured",
            "component": "CategoryBalances",
        },
    )
    return rolled + len(missing)
