"""Applies signed transaction amounts to category month balances.

Activity belongs to the month the money moved in. Available is what the
user can still act on, so it always lands in the current month: a
transaction dated in an earlier month adds to that month's activity and
to the current month's available.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from . import store
from .dates import MonthContext
from .models import Category

logger = logging.getLogger(__name__)


def _post(category: Category, amount: Decimal, on: date, context: MonthContext) -> str:
    if context.is_past_month(on):
        historical = store.get_or_create_category_balance(category, on.year, on.month)
        historical.activity += amount
        historical.save(update_fields=["activity", "updated_at"])

        current = store.get_or_create_category_balance(category, context.year, context.month)
        current.available += amount
        current.save(update_fields=["available", "updated_at"])
        return "past_month"

    apply_to_month(category, amount, on.year, on.month)
    return "same_month"


def apply_delta(category: Category, amount: Decimal, on: date, context: MonthContext) -> None:
    if not amount:
        return
    context.ensure_not_future(on)
    rule = _post(category, amount, on, context)
    logger.debug(
        "Category activity applied",
        extra={
            "category_id": str(category.pk),
            "amount": str(amount),
            "date": on.isoformat(),
            "rule": rule,
            "action": "category_activity_applied",
            "component": "CategoryActivityProjector",
        },
    )


def reverse_delta(category: Category, amount: Decimal, on: date, context: MonthContext) -> None:
    """Undo a previous ``apply_delta`` with the same category, amount and date.

    No future-date check: a row that was valid when written must stay removable.
    """
    if not amount:
        return
    rule = _post(category, -amount, on, context)
    logger.debug(
        "Category activity reversed",
        extra={
            "category_id": str(category.pk),
            "amount": str(-amount),
            "date": on.isoformat(),
            "rule": rule,
            "action": "category_activity_reversed",
            "component": "CategoryActivityProjector",
        },
    )


def apply_to_month(category: Category, amount: Decimal, year: int, month: int) -> None:
    """Add ``amount`` to both activity and available of one month."""
    balance = store.get_or_create_category_balance(category, year, month)
    balance.activity += amount
    balance.available += amount
    balance.save(update_fields=["activity", "available", "updated_at"])


def apply_current_month(category: Category, amount: Decimal, context: MonthContext) -> None:
    if not amount:
        return
    apply_to_month(category, amount, context.year, context.month)
