"""Recurring transactions and the daily job that posts the ones that are due.

Due transactions go through ``transaction_lifecycle.create_transaction``
like any other, so category activity, credit card coverage and account
balances all follow.
"""
from __future__ import annotations

import logging
from datetime import date

from django.core.exceptions import ValidationError
from django.db import transaction

from . import store, transaction_lifecycle
from .dates import MonthContext
from .models import ScheduledTransaction, ScheduleFrequency

logger = logging.getLogger(__name__)

DEFAULT_MEMO = "Scheduled transaction"

# Fields each frequency needs to know when it is due
REQUIRED_FIELDS = {
    ScheduleFrequency.ONCE: ("specific_date",),
    ScheduleFrequency.WEEKLY: ("day_of_week",),
    ScheduleFrequency.BIWEEKLY: ("day_of_week",),
    ScheduleFrequency.MONTHLY: ("day_of_month",),
    ScheduleFrequency.YEARLY: ("day_of_month", "month_of_year"),
}

EDITABLE_FIELDS = (
    "payee",
    "amount",
    "memo",
    "frequency",
    "specific_date",
    "day_of_month",
    "day_of_week",
    "month_of_year",
    "is_active",
)

CLEARABLE_FIELDS = ("specific_date", "day_of_month", "day_of_week", "month_of_year")


def _check_schedule(schedule: ScheduledTransaction) -> None:
    missing = {
        name: ["This field is required for this frequency."]
        for name in REQUIRED_FIELDS[schedule.frequency]
        if getattr(schedule, name) is None
    }
    if missing:
        raise ValidationError(missing)


def _apply_references(user, schedule: ScheduledTransaction, data: dict) -> None:
    if data.get("account_id"):
        account = store.get_account(user, data["account_id"])
        if account.budget_id != schedule.budget_id:
            raise ValidationError({"account_id": ["Account belongs to a different budget."]})
        schedule.account = account
    if "category_id" in data:
        category = None
        if data["category_id"]:
            category = store.get_category(user, data["category_id"])
            if category.budget_id != schedule.budget_id:
                raise ValidationError({"category_id": ["Category belongs to a different budget."]})
        schedule.category = category


@transaction.atomic
def create_schedule(user, data: dict) -> ScheduledTransaction:
    budget = store.get_budget(user, data["budget_id"])
    schedule = ScheduledTransaction(user=user, budget=budget)
    _apply_references(user, schedule, data)
    for name in EDITABLE_FIELDS:
        if data.get(name) is not None:
            setattr(schedule, name, data[name])
    _check_schedule(schedule)
    schedule.save()

    logger.info(
        "Scheduled transaction created",
        extra={
            "scheduled_transaction_id": str(schedule.pk),
            "budget_id": str(budget.pk),
            "frequency": schedule.frequency,
            "action": "schedule_created",
            "component": "ScheduledTransactions",
        },
    )
    return schedule


def list_for_budget(user, budget_id):
    budget = store.get_budget(user, budget_id)
    return ScheduledTransaction.objects.filter(budget=budget, user=user)


def list_for_account(user, account_id):
    account = store.get_account(user, account_id)
    return ScheduledTransaction.objects.filter(account=account, user=user)


def get_schedule(user, schedule_id) -> ScheduledTransaction:
    return ScheduledTransaction.objects.select_related("account", "category").get(pk=schedule_id, user=user)


@transaction.atomic
def update_schedule(user, schedule_id, changes: dict) -> ScheduledTransaction:
    schedule = get_schedule(user, schedule_id)
    _apply_references(user, schedule, changes)
    for name in EDITABLE_FIELDS:
        if name in changes and (changes[name] is not None or name in CLEARABLE_FIELDS):
            setattr(schedule, name, changes[name])
    _check_schedule(schedule)
    schedule.save()
    return schedule


def delete_schedule(user, schedule_id) -> None:
    get_schedule(user, schedule_id).delete()


def sunday_based_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def is_due(schedule: ScheduledTransaction, on: date) -> bool:
    last = schedule.last_created_date
    frequency = schedule.frequency

    if frequency == ScheduleFrequency.ONCE:
        return on == schedule.specific_date and last is None
    if frequency == ScheduleFrequency.MONTHLY:
        return on.day == schedule.day_of_month and (last is None or (last.year, last.month) != (on.year, on.month))
    if frequency in (ScheduleFrequency.WEEKLY, ScheduleFrequency.BIWEEKLY):
        gap = 7 if frequency == ScheduleFrequency.WEEKLY else 14
        return sunday_based_weekday(on) == schedule.day_of_week and (last is None or (on - last).days >= gap)
    if frequency == ScheduleFrequency.YEARLY:
        return (
            on.day == schedule.day_of_month
            and on.month == schedule.month_of_year
            and (last is None or last.year != on.year)
        )
    return False


def post_due(on: date, user=None) -> list[transaction_lifecycle.TransactionResult]:
    """Create today's transaction for every active schedule that is due on ``on``.

    One-time schedules are switched off once posted.
    """
    schedules = ScheduledTransaction.objects.select_related("account", "user").filter(is_active=True)
    if user is not None:
        schedules = schedules.filter(user=user)
    context = MonthContext.for_date(on)

    results = []
    for schedule in schedules.order_by("created_at"):
        if not schedule.account.is_active or not is_due(schedule, on):
            continue
        with transaction.atomic():
            result = transaction_lifecycle.create_transaction(
                schedule.user,
                {
                    "account_id": schedule.account_id,
                    "category_id": schedule.category_id,
                    "date": on,
                    "amount": schedule.amount,
                    "payee": schedule.payee,
                    "memo": schedule.memo or DEFAULT_MEMO,
                },
                context,
            )
            schedule.last_created_date = on
            if schedule.frequency == ScheduleFrequency.ONCE:
                schedule.is_active = False
            schedule.save(update_fields=["last_created_date", "is_active", "updated_at"])
        results.append(result)

        logger.info(
            "Scheduled transaction posted",
            extra={
                "scheduled_transaction_id": str(schedule.pk),
                "transaction_id": str(result.transaction.pk),
                "date": on.isoformat(),
                "action": "schedule_posted",
                "component": "ScheduledTransactions",
            },
        )
    return results
