from __future__ import annotations

import logging

from django.db import transaction

from . import store
from .exceptions import ConflictError
from .models import (
    Budget,
    CategoryGroup,
    CREDIT_CARD_PAYMENTS_GROUP,
    HIDDEN_CATEGORIES_GROUP,
)

logger = logging.getLogger(__name__)

SYSTEM_GROUP_ORDER = {
    CREDIT_CARD_PAYMENTS_GROUP: 999,
    HIDDEN_CATEGORIES_GROUP: 1000,
}

EDITABLE_FIELDS = ("name", "currency", "currency_placement", "number_format", "date_format", "theme")


def _ensure_unique_name(user, name: str, exclude_id=None) -> None:
    qs = Budget.objects.filter(user=user, name__iexact=name.strip())
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    if qs.exists():
        raise ConflictError(f"A budget named '{name}' already exists.")


@transaction.atomic
def create_budget(user, data: dict) -> Budget:
    """Create a budget together with its system category groups."""
    _ensure_unique_name(user, data["name"])
    fields = {k: data[k] for k in EDITABLE_FIELDS if data.get(k)}
    fields["name"] = fields["name"].strip()
    budget = Budget.objects.create(user=user, **fields)

    for name, order in SYSTEM_GROUP_ORDER.items():
        CategoryGroup.objects.create(
            user=user,
            budget=budget,
            name=name,
            display_order=order,
            is_system_group=True,
        )

    logger.info(
        "Budget created",
        extra={
            "budget_id": str(budget.pk),
            "user_id": user.pk,
            "action": "budget_created",
            "component": "Budgets",
        },
    )
    return budget


def list_budgets(user):
    return Budget.objects.filter(user=user)


@transaction.atomic
def update_budget(user, budget_id, changes: dict) -> Budget:
    budget = store.lock_budget(user, budget_id)
    fields = {k: changes[k] for k in EDITABLE_FIELDS if changes.get(k)}
    if "name" in fields:
        fields["name"] = fields["name"].strip()
        _ensure_unique_name(user, fields["name"], exclude_id=budget.pk)
    for name, value in fields.items():
        setattr(budget, name, value)
    if fields:
        budget.save(update_fields=[*fields, "updated_at"])
    return budget


@transaction.atomic
def delete_budget(user, budget_id) -> None:
    budget = store.lock_budget(user, budget_id)
    budget_pk = budget.pk
    budget.delete()
    logger.info(
        "Budget deleted",
        extra={
            "budget_id": str(budget_pk),
            "user_id": user.pk,
            "action": "budget_deleted",
            "component": "Budgets",
        },
    )
