from __future__ import annotations

import logging

from django.db import models, transaction

from . import store
from .exceptions import ConflictError
from .models import Category, CategoryGroup, HIDDEN_CATEGORIES_GROUP

logger = logging.getLogger(__name__)


def _ensure_editable(group: CategoryGroup, verb: str) -> None:
    if group.is_system_group:
        raise ConflictError(f"System group '{group.name}' cannot be {verb}.")


@transaction.atomic
def create_group(user, data: dict) -> CategoryGroup:
    budget = store.lock_budget(user, data["budget_id"])
    display_order = data.get("display_order")
    if display_order is None:
        display_order = (
            CategoryGroup.objects.filter(budget=budget, is_system_group=False)
            .aggregate(m=models.Max("display_order"))
            .get("m")
            or 0
        ) + 1
    return CategoryGroup.objects.create(
        user=user,
        budget=budget,
        name=data["name"].strip(),
        display_order=display_order,
    )


def list_groups(user, budget_id):
    budget = store.get_budget(user, budget_id)
    return CategoryGroup.objects.filter(budget=budget, user=user)


@transaction.atomic
def update_group(user, group_id, changes: dict) -> CategoryGroup:
    group = store.get_category_group(user, group_id)
    store.lock_budget(user, group.budget_id)
    _ensure_editable(group, "renamed")
    updated = []
    if changes.get("name"):
        group.name = changes["name"].strip()
        updated.append("name")
    if changes.get("display_order") is not None:
        group.display_order = changes["display_order"]
        updated.append("display_order")
    if updated:
        group.save(update_fields=updated)
    return group


@transaction.atomic
def delete_group(user, group_id) -> None:
    group = store.get_category_group(user, group_id)
    store.lock_budget(user, group.budget_id)
    _ensure_editable(group, "deleted")
    if Category.objects.filter(category_group=group, transactions__isnull=False).exists():
        raise ConflictError("Categories in this group still have transactions; move them before deleting.")
    group.delete()
    logger.info(
        "Category group deleted",
        extra={
            "category_group_id": str(group_id),
            "action": "category_group_deleted",
            "component": "CategoryGroups",
        },
    )


@transaction.atomic
def hide_group(user, group_id) -> int:
    """Move every category of the group into Hidden Categories; returns how many moved."""
    group = store.get_category_group(user, group_id)
    budget = store.lock_budget(user, group.budget_id)
    _ensure_editable(group, "hidden")
    hidden = store.system_group(budget, HIDDEN_CATEGORIES_GROUP)
    moved = Category.objects.filter(category_group=group, user=user).update(category_group=hidden)
    logger.info(
        "Category group hidden",
        extra={
            "category_group_id": str(group.pk),
            "moved_categories": moved,
            "action": "category_group_hidden",
            "component": "CategoryGroups",
        },
    )
    return moved


@transaction.atomic
def reorder_groups(user, group_ids: list) -> list[CategoryGroup]:
    groups = {g.pk: g for g in CategoryGroup.objects.filter(pk__in=group_ids, user=user)}
    if len(groups) != len(set(group_ids)):
        raise CategoryGroup.DoesNotExist("One or more category groups were not found.")
    for position, group_id in enumerate(group_ids):
        group = groups[group_id]
        if group.is_system_group:
            continue
        if group.display_order != position:
            group.display_order = position
            group.save(update_fields=["display_order"])
    return [groups[group_id] for group_id in group_ids]
