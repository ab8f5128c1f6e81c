"""Named auto-assign configurations: lists of (category, amount) pairs
that can be applied to a month in one go."""
from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import models, transaction

from . import store
from .assignments import ensure_not_hidden
from .exceptions import ConflictError
from .models import AutoAssignItem, Category, ZERO

logger = logging.getLogger(__name__)


def _validated_categories(user, budget, items: list[dict]) -> dict:
    ids = [item["category_id"] for item in items]
    if len(ids) != len(set(ids)):
        raise ValidationError({"items": ["Each category may appear only once per configuration."]})
    categories = {
        c.pk: c
        for c in Category.objects.select_related("category_group").filter(pk__in=ids, user=user, budget=budget)
    }
    if len(categories) != len(ids):
        raise ValidationError({"items": ["One or more categories do not belong to this budget."]})
    ensure_not_hidden(categories.values())
    return categories


def _write_items(user, budget, name: str, items: list[dict]) -> list[AutoAssignItem]:
    categories = _validated_categories(user, budget, items)
    return AutoAssignItem.objects.bulk_create(
        [
            AutoAssignItem(
                user=user,
                budget=budget,
                name=name,
                category=categories[item["category_id"]],
                amount=item["amount"],
            )
            for item in items
        ]
    )


@transaction.atomic
def create_configuration(user, budget_id, name: str, items: list[dict]) -> list[AutoAssignItem]:
    budget = store.lock_budget(user, budget_id)
    if AutoAssignItem.objects.filter(budget=budget, user=user, name=name).exists():
        raise ConflictError(f"An auto-assign configuration named '{name}' already exists.")
    created = _write_items(user, budget, name, items)
    logger.info(
        "Auto-assign configuration created",
        extra={
            "budget_id": str(budget.pk),
            "configuration": name,
            "items": len(created),
            "action": "auto_assign_created",
            "component": "AutoAssign",
        },
    )
    return created


def list_configurations(user, budget_id) -> list[dict]:
    budget = store.get_budget(user, budget_id)
    rows = (
        AutoAssignItem.objects.filter(budget=budget, user=user)
        .values("name")
        .annotate(
            item_count=models.Count("id"),
            total_amount=models.Sum("amount"),
            created_at=models.Min("created_at"),
        )
        .order_by("name")
    )
    return [
        {
            "name": row["name"],
            "budget_id": budget.pk,
            "item_count": row["item_count"],
            "total_amount": row["total_amount"] or ZERO,
            "created_at": row["created_at"],
        }
        for row in rows
    ]


def get_configuration(user, budget_id, name: str) -> list[AutoAssignItem]:
    budget = store.get_budget(user, budget_id)
    items = list(AutoAssignItem.objects.filter(budget=budget, user=user, name=name).select_related("category"))
    if not items:
        raise AutoAssignItem.DoesNotExist(f"Auto-assign configuration '{name}' not found.")
    return items


@transaction.atomic
def update_configuration(user, budget_id, name: str, new_name: str | None = None,
                         items: list[dict] | None = None) -> list[AutoAssignItem]:
    """Rename a configuration and/or replace its items."""
    budget = store.lock_budget(user, budget_id)
    current = AutoAssignItem.objects.filter(budget=budget, user=user, name=name)
    if not current.exists():
        raise AutoAssignItem.DoesNotExist(f"Auto-assign configuration '{name}' not found.")

    target_name = name
    if new_name and new_name != name:
        if AutoAssignItem.objects.filter(budget=budget, user=user, name=new_name).exists():
            raise ConflictError(f"An auto-assign configuration named '{new_name}' already exists.")
        current.update(name=new_name)
        target_name = new_name

    if items is not None:
        AutoAssignItem.objects.filter(budget=budget, user=user, name=target_name).delete()
        _write_items(user, budget, target_name, items)

    return list(
        AutoAssignItem.objects.filter(budget=budget, user=user, name=target_name).select_related("category")
    )


@transaction.atomic
def delete_configuration(user, budget_id, name: str) -> int:
    budget = store.lock_budget(user, budget_id)
    deleted, _ = AutoAssignItem.objects.filter(budget=budget, user=user, name=name).delete()
    if not deleted:
        raise AutoAssignItem.DoesNotExist(f"Auto-assign configuration '{name}' not found.")
    return deleted
