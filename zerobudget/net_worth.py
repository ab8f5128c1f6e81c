from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import models, transaction

from . import store
from .dates import MonthContext
from .models import Account, AccountType, Budget, NetWorthSnapshot, ZERO

logger = logging.getLogger(__name__)

ASSET_TYPES = (AccountType.CASH, AccountType.TRACKING)


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def calculate(budget: Budget) -> dict[str, Decimal]:
    """Totals over open accounts: cash and tracking balances are assets,
    credit balances (negative while owed) are liabilities."""
    totals = Account.objects.filter(budget=budget, user=budget.user_id, is_active=True).aggregate(
        assets=models.Sum("working_balance", filter=models.Q(account_type__in=ASSET_TYPES)),
        liabilities=models.Sum("working_balance", filter=models.Q(account_type=AccountType.CREDIT)),
    )
    assets = totals["assets"] or ZERO
    liabilities = totals["liabilities"] or ZERO
    return {
        "total_assets": assets,
        "total_liabilities": liabilities,
        "net_worth": assets + liabilities,
    }


def _snapshot(budget: Budget, month_date: date) -> NetWorthSnapshot:
    snapshot, created = NetWorthSnapshot.objects.update_or_create(
        budget=budget,
        month_date=first_of_month(month_date),
        defaults={"user_id": budget.user_id, **calculate(budget)},
    )
    logger.info(
        "Net worth snapshot saved",
        extra={
            "budget_id": str(budget.pk),
            "month_date": snapshot.month_date.isoformat(),
            "net_worth": str(snapshot.net_worth),
            "replaced": not created,
            "action": "net_worth_snapshot",
            "component": "NetWorth",
        },
    )
    return snapshot


@transaction.atomic
def take_snapshot(user, budget_id, context: MonthContext, month_date: date | None = None) -> NetWorthSnapshot:
    """Store the budget's current totals under the first day of ``month_date``'s month
    (the context's month by default), replacing an earlier snapshot for that month."""
    budget = store.get_budget(user, budget_id)
    return _snapshot(budget, month_date or context.today)


def snapshot_all(on: date) -> int:
    """Snapshot every budget that still has an open account."""
    budgets = Budget.objects.filter(accounts__is_active=True).distinct()
    count = 0
    for budget in budgets:
        with transaction.atomic():
            _snapshot(budget, on)
        count += 1
    return count


def history(user, budget_id):
    budget = store.get_budget(user, budget_id)
    return NetWorthSnapshot.objects.filter(budget=budget, user=user).order_by("month_date")


def delete_history(user, budget_id) -> int:
    budget = store.get_budget(user, budget_id)
    deleted, _ = NetWorthSnapshot.objects.filter(budget=budget, user=user).delete()
    return deleted


def update_note(user, budget_id, month_date: date, note: str) -> NetWorthSnapshot:
    budget = store.get_budget(user, budget_id)
    snapshot = NetWorthSnapshot.objects.get(budget=budget, user=user, month_date=first_of_month(month_date))
    snapshot.note = note
    snapshot.save(update_fields=["note", "updated_at"])
    return snapshot
