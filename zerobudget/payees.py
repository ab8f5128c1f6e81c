"""Remembered payees, one per budget and case-insensitive name."""
from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone

from . import store
from .models import Budget, Category, Payee, Transaction

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    return name.strip().lower()


def _upsert(budget: Budget, name: str, category: Category | None, is_transfer: bool) -> Payee:
    name = name.strip()
    if not name:
        raise ValidationError({"name": ["Payee name cannot be blank."]})

    payee, created = Payee.objects.select_for_update().get_or_create(
        budget=budget,
        normalized_name=normalize_name(name),
        defaults={
            "user_id": budget.user_id,
            "name": name,
            "last_category": category,
            "last_used_at": timezone.now(),
            "is_transfer": is_transfer,
        },
    )
    if not created:
        # Latest spelling wins
        payee.name = name
        if category is not None:
            payee.last_category = category
        payee.last_used_at = timezone.now()
        payee.save(update_fields=["name", "last_category", "last_used_at", "updated_at"])

    logger.debug(
        "Payee recorded",
        extra={
            "payee_id": str(payee.pk),
            "budget_id": str(budget.pk),
            "new_payee": created,
            "action": "payee_upserted",
            "component": "Payees",
        },
    )
    return payee


def list_for_budget(user, budget_id):
    """Most recently used first; payees never used sort last, by name."""
    budget = store.get_budget(user, budget_id)
    return Payee.objects.filter(budget=budget, user=user).order_by(
        models.F("last_used_at").desc(nulls_last=True), "name"
    )


@transaction.atomic
def upsert(user, data: dict) -> Payee:
    budget = store.get_budget(user, data["budget_id"])
    category = None
    if data.get("last_category_id"):
        category = store.get_category(user, data["last_category_id"])
        if category.budget_id != budget.pk:
            raise ValidationError({"last_category_id": ["Category belongs to a different budget."]})
    return _upsert(budget, data["name"], category, bool(data.get("is_transfer")))


def record_use(tx: Transaction, is_transfer: bool = False) -> Payee | None:
    """Remember the payee of a transaction that was just written; blank payees are skipped."""
    if not tx.payee.strip():
        return None
    return _upsert(tx.budget, tx.payee, tx.category, is_transfer)
