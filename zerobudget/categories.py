from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import models, transaction

from . import ready_to_assign, store
from .dates import MonthContext
from .exceptions import ConflictError
from .models import Category, CategoryBalance, CategoryGroup, HIDDEN_CATEGORIES_GROUP

logger = logging.getLogger(__name__)


@dataclass
class CategoryResult:
    category: Category
    ready_to_assign: Decimal


@dataclass
class CategoryRow:
    category: Category
    balance: CategoryBalance | None


@transaction.atomic
def create_category(user, data: dict, context: MonthContext) -> CategoryResult:
    """Add a category to a user group and open a zero balance for the current month."""
    group = store.get_category_group(user, data["category_group_id"])
    budget = store.lock_budget(user, group.budget_id)
    if group.is_system_group:
        raise ConflictError(f"Cannot manually add categories to the '{group.name}' group.")

    display_order = data.get("display_order")
    if display_order is None:
        display_order = (
            Category.objects.filter(category_group=group).aggregate(m=models.Max("display_order")).get("m") or 0
        ) + 1
    category = Category.objects.create(
        user=user,
        budget=budget,
        category_group=group,
        name=data["name"].strip(),
        display_order=display_order,
    )
    store.get_or_create_category_balance(category, context.year, context.month)

    logger.info(
        "Category created",
        extra={
            "category_id": str(category.pk),
            "category_group_id": str(group.pk),
            "action": "category_created",
            "component": "Categories",
        },
    )
    return CategoryResult(category=category, ready_to_assign=ready_to_assign.for_context(budget, context))


def _with_balances(categories, year: int, month: int) -> list[CategoryRow]:
    categories = list(categories)
    balances = {
        b.category_id: b
        for b in CategoryBalance.objects.filter(category__in=categories, year=year, month=month)
    }
    return [CategoryRow(category=c, balance=balances.get(c.pk)) for c in categories]


def list_for_group(user, group_id, year: int, month: int) -> list[CategoryRow]:
    group = store.get_category_group(user, group_id)
    return _with_balances(Category.objects.filter(category_group=group, user=user), year, month)


def list_for_budget(user, budget_id, year: int, month: int) -> list[CategoryRow]:
    budget = store.get_budget(user, budget_id)
    categories = Category.objects.filter(budget=budget, user=user).select_related("category_group").order_by(
        "category_group__display_order", "display_order", "name"
    )
    return _with_balances(categories, year, month)


@transaction.atomic
def delete_category(user, category_id, context: MonthContext) -> Decimal:
    category = store.get_category(user, category_id)
    budget = store.lock_budget(user, category.budget_id)
    if category.is_credit_card_payment:
        raise ConflictError("Credit card payment categories cannot be deleted.")
    if category.transactions.exists():
        raise ConflictError(f"'{category.name}' still has transactions; recategorize them before deleting.")
    category.delete()
    logger.info(
        "Category deleted",
        extra={
            "category_id": str(category_id),
            "action": "category_deleted",
            "component": "Categories",
        },
    )
    return ready_to_assign.for_context(budget, context)


@transaction.atomic
def hide_category(user, category_id, context: MonthContext) -> CategoryResult:
    category = store.get_category(user, category_id)
    budget = store.lock_budget(user, category.budget_id)
    if category.is_credit_card_payment:
        raise ConflictError("Credit card payment categories cannot be hidden.")
    hidden = store.system_group(budget, HIDDEN_CATEGORIES_GROUP)
    if category.category_group_id != hidden.pk:
        category.category_group = hidden
        category.save(update_fields=["category_group"])
    return CategoryResult(category=category, ready_to_assign=ready_to_assign.for_context(budget, context))


@transaction.atomic
def unhide_category(user, category_id, context: MonthContext, target_group_id=None) -> CategoryResult:
    category = store.get_category(user, category_id)
    budget = store.lock_budget(user, category.budget_id)
    if category.category_group.name != HIDDEN_CATEGORIES_GROUP or not category.category_group.is_system_group:
        raise ConflictError("Category is not currently hidden.")

    if target_group_id is not None:
        target = store.get_category_group(user, target_group_id)
        if target.budget_id != budget.pk or target.is_system_group:
            raise ConflictError("Categories can only be restored to a regular group of the same budget.")
    else:
        target = CategoryGroup.objects.filter(budget=budget, user=user, is_system_group=False).first()
        if target is None:
            raise CategoryGroup.DoesNotExist("No available category group to move to.")

    category.category_group = target
    category.save(update_fields=["category_group"])
    return CategoryResult(category=category, ready_to_assign=ready_to_assign.for_context(budget, context))


@transaction.atomic
def reorder_categories(user, category_ids: list) -> list[Category]:
    """Set display_order to each category's position in ``category_ids``."""
    categories = {c.pk: c for c in Category.objects.filter(pk__in=category_ids, user=user)}
    if len(categories) != len(set(category_ids)):
        raise Category.DoesNotExist("One or more categories were not found.")
    for position, category_id in enumerate(category_ids):
        category = categories[category_id]
        if category.display_order != position:
            category.display_order = position
            category.save(update_fields=["display_order"])
    return [categories[category_id] for category_id in category_ids]
