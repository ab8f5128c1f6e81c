"""Assigning money to categories and moving it between them.

Any increase of a category's money (assigning, moving money in, pulling
from Ready to Assign, applying an auto-assign configuration) is offered to
the credit card coverage flow so it can pay down uncovered card spending
in that category.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from . import coverage, ready_to_assign, store
from .dates import MonthContext
from .exceptions import ConflictError, PreconditionFailed
from .models import (
    AutoAssignItem,
    Category,
    CategoryBalance,
    HIDDEN_CATEGORIES_GROUP,
    ZERO,
)

logger = logging.getLogger(__name__)

METADATA_FIELDS = ("name", "display_order")
MONEY_FIELDS = ("assigned", "activity", "available")


@dataclass
class AssignmentResult:
    category: Category
    balance: CategoryBalance | None
    ready_to_assign: Decimal


@dataclass
class MoveResult:
    source: CategoryBalance
    destination: CategoryBalance | None
    ready_to_assign: Decimal


def _period(year: int | None, month: int | None, context: MonthContext) -> tuple[int, int]:
    if year and month:
        return year, month
    return context.period


def _offer_to_coverage(category: Category, amount: Decimal, year: int, month: int) -> Decimal:
    moved = ZERO
    with coverage.coverage_guard("assignment_coverage_failed", category_id=category.pk):
        moved = coverage.apply_assignment_coverage(category, amount, year, month)
    return moved


def _require_positive(amount: Decimal) -> None:
    if amount is None or amount <= 0:
        raise ValidationError({"amount": ["Amount must be greater than zero."]})


@transaction.atomic
def update_category(user, category_id, changes: dict, context: MonthContext) -> AssignmentResult:
    """Partial update of a category and its balance for one month.

    ``assigned`` is applied as a difference, so available moves with it.
    ``activity`` and ``available`` are written as given.
    """
    category = store.get_category(user, category_id)
    budget = store.lock_budget(user, category.budget_id)

    metadata = {k: changes[k] for k in METADATA_FIELDS if changes.get(k) is not None}
    if "name" in metadata and metadata["name"] != category.name:
        if category.is_credit_card_payment:
            raise ConflictError("Credit card payment categories cannot be renamed.")
    if metadata:
        for name, value in metadata.items():
            setattr(category, name, value)
        category.save(update_fields=list(metadata))

    money = {k: changes[k] for k in MONEY_FIELDS if changes.get(k) is not None}
    balance = None
    if money:
        year, month = _period(changes.get("year"), changes.get("month"), context)
        balance = store.get_or_create_category_balance(category, year, month)

        increase = ZERO
        if "assigned" in money:
            new_assigned = money["assigned"]
            if new_assigned < 0:
                raise ValidationError({"assigned": ["Assigned amount cannot be negative."]})
            difference = new_assigned - balance.assigned
            balance.assigned = new_assigned
            balance.available += difference
            increase = difference
        if "activity" in money:
            balance.activity = money["activity"]
        if "available" in money:
            balance.available = money["available"]
        balance.save(update_fields=["assigned", "activity", "available", "updated_at"])

        logger.info(
            "Category balance updated",
            extra={
                "category_id": str(category.pk),
                "year": year,
                "month": month,
                "fields": sorted(money),
                "assigned_change": str(increase),
                "action": "category_balance_updated",
                "component": "AssignmentEngine",
            },
        )
        if increase > 0:
            _offer_to_coverage(category, increase, year, month)
            balance.refresh_from_db()

    return AssignmentResult(
        category=category,
        balance=balance,
        ready_to_assign=ready_to_assign.for_context(budget, context),
    )


@transaction.atomic
def move_money(user, source_id, destination_id, amount: Decimal, context: MonthContext,
               year: int | None = None, month: int | None = None) -> MoveResult:
    """Move available money from one category to another in the same month."""
    _require_positive(amount)
    source_category = store.get_category(user, source_id)
    destination_category = store.get_category(user, destination_id)
    if source_category.budget_id != destination_category.budget_id:
        raise ValidationError("Both categories must belong to the same budget.")
    if source_category.pk == destination_category.pk:
        raise ValidationError("Source and destination categories must differ.")
    budget = store.lock_budget(user, source_category.budget_id)
    year, month = _period(year, month, context)

    source = store.get_or_create_category_balance(source_category, year, month)
    if source.available < amount:
        raise PreconditionFailed(
            f"Insufficient funds in {source_category.name}: {source.available:,.2f} available."
        )

    source.available -= amount
    source.save(update_fields=["available", "updated_at"])

    try:
        with transaction.atomic():
            destination = store.get_or_create_category_balance(destination_category, year, month)
            destination.available += amount
            destination.save(update_fields=["available", "updated_at"])
    except DatabaseError:
        source.available += amount
        source.save(update_fields=["available", "updated_at"])
        logger.error(
            "Move money failed, source restored",
            extra={
                "source_category_id": str(source_category.pk),
                "destination_category_id": str(destination_category.pk),
                "amount": str(amount),
                "action": "move_money_rolled_back",
                "component": "AssignmentEngine",
            },
        )
        raise

    logger.info(
        "Money moved between categories",
        extra={
            "source_category_id": str(source_category.pk),
            "destination_category_id": str(destination_category.pk),
            "amount": str(amount),
            "year": year,
            "month": month,
            "action": "money_moved",
            "component": "AssignmentEngine",
        },
    )

    if _offer_to_coverage(destination_category, amount, year, month):
        destination.refresh_from_db()

    return MoveResult(
        source=source,
        destination=destination,
        ready_to_assign=ready_to_assign.for_context(budget, context),
    )


@transaction.atomic
def move_to_ready_to_assign(user, category_id, amount: Decimal, context: MonthContext,
                            year: int | None = None, month: int | None = None) -> MoveResult:
    """Un-assign money from a category back to Ready to Assign."""
    _require_positive(amount)
    category = store.get_category(user, category_id)
    budget = store.lock_budget(user, category.budget_id)
    year, month = _period(year, month, context)

    balance = store.get_or_create_category_balance(category, year, month)
    if balance.available < amount:
        raise PreconditionFailed(
            f"Insufficient funds in {category.name}: {balance.available:,.2f} available."
        )
    balance.assigned -= amount
    balance.available -= amount
    balance.save(update_fields=["assigned", "available", "updated_at"])

    logger.info(
        "Money moved to ready to assign",
        extra={
            "category_id": str(category.pk),
            "amount": str(amount),
            "action": "moved_to_ready_to_assign",
            "component": "AssignmentEngine",
        },
    )
    return MoveResult(
        source=balance,
        destination=None,
        ready_to_assign=ready_to_assign.for_context(budget, context),
    )


@transaction.atomic
def pull_from_ready_to_assign(user, category_id, amount: Decimal, context: MonthContext,
                              year: int | None = None, month: int | None = None) -> MoveResult:
    _require_positive(amount)
    category = store.get_category(user, category_id)
    budget = store.lock_budget(user, category.budget_id)
    year, month = _period(year, month, context)

    available_to_assign = ready_to_assign.for_context(budget, context)
    if available_to_assign < amount:
        raise PreconditionFailed(
            f"Insufficient Ready to Assign: {available_to_assign:,.2f} available."
        )

    balance = store.get_or_create_category_balance(category, year, month)
    balance.assigned += amount
    balance.available += amount
    balance.save(update_fields=["assigned", "available", "updated_at"])

    logger.info(
        "Money pulled from ready to assign",
        extra={
            "category_id": str(category.pk),
            "amount": str(amount),
            "action": "pulled_from_ready_to_assign",
            "component": "AssignmentEngine",
        },
    )
    if _offer_to_coverage(category, amount, year, month):
        balance.refresh_from_db()

    return MoveResult(
        source=balance,
        destination=None,
        ready_to_assign=ready_to_assign.for_context(budget, context),
    )


def ensure_not_hidden(categories) -> None:
    hidden = [c.name for c in categories if c.category_group.name == HIDDEN_CATEGORIES_GROUP
              and c.category_group.is_system_group]
    if hidden:
        raise ConflictError(
            "Hidden categories cannot be used in auto-assign configurations: " + ", ".join(sorted(hidden))
        )


@transaction.atomic
def apply_auto_assign(user, budget_id, name: str, context: MonthContext,
                      year: int | None = None, month: int | None = None) -> dict:
    """Add every item of the named configuration to its category's assigned amount."""
    budget = store.lock_budget(user, budget_id)
    items = list(
        AutoAssignItem.objects.select_related("category", "category__category_group")
        .filter(budget=budget, user=user, name=name)
    )
    if not items:
        raise AutoAssignItem.DoesNotExist(f"Auto-assign configuration '{name}' not found.")
    ensure_not_hidden([item.category for item in items])

    year, month = _period(year, month, context)
    applied = []
    for item in items:
        balance = store.get_or_create_category_balance(item.category, year, month)
        balance.assigned += item.amount
        balance.available += item.amount
        balance.save(update_fields=["assigned", "available", "updated_at"])
        applied.append({"category_id": item.category_id, "amount": item.amount})

    for item in items:
        if item.amount > 0:
            _offer_to_coverage(item.category, item.amount, year, month)

    logger.info(
        "Auto-assign configuration applied",
        extra={
            "budget_id": str(budget.pk),
            "configuration": name,
            "applied_count": len(applied),
            "action": "auto_assign_applied",
            "component": "AssignmentEngine",
        },
    )
    return {
        "success": len(applied) > 0,
        "appliedCount": len(applied),
        "readyToAssign": ready_to_assign.for_context(budget, context),
        "appliedCategories": applied,
    }
