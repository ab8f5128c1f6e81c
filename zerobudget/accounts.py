from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models, transaction

from . import account_balances, ready_to_assign, store, transaction_lifecycle
from .dates import MonthContext
from .exceptions import ConflictError
from .models import (
    Account,
    AccountType,
    Category,
    CREDIT_CARD_PAYMENTS_GROUP,
    Transaction,
    ZERO,
    payment_category_name,
)

logger = logging.getLogger(__name__)

CLOSURE_PAYEE = "Account Closure Adjustment"
RECONCILIATION_PAYEE = "Reconciliation Adjustment"
BALANCE_UPDATE_PAYEE = "Balance Update"


@dataclass
class AccountResult:
    account: Account
    ready_to_assign: Decimal
    adjustment_transaction: Transaction | None = None


def _ensure_unique_name(budget, name: str, exclude_id=None) -> None:
    qs = Account.objects.filter(budget=budget, user=budget.user_id, name__iexact=name.strip())
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    if qs.exists():
        raise ConflictError(f"An account already exists with the name '{name}'.")


def _create_payment_category(account: Account, context: MonthContext) -> Category:
    group = store.system_group(account.budget, CREDIT_CARD_PAYMENTS_GROUP)
    next_order = (
        Category.objects.filter(category_group=group).aggregate(m=models.Max("display_order")).get("m") or 0
    )
    category = Category.objects.create(
        user_id=account.user_id,
        budget_id=account.budget_id,
        category_group=group,
        name=payment_category_name(account.name),
        display_order=next_order + 1,
        is_credit_card_payment=True,
        linked_account=account,
    )
    store.get_or_create_category_balance(category, context.year, context.month)
    return category


@transaction.atomic
def create_account(user, data: dict, context: MonthContext) -> AccountResult:
    """Open an account; credit accounts also get their payment category."""
    budget = store.lock_budget(user, data["budget_id"])
    name = data["name"].strip()
    _ensure_unique_name(budget, name)

    next_order = (
        Account.objects.filter(budget=budget).aggregate(m=models.Max("display_order")).get("m") or 0
    )
    account = Account.objects.create(
        user=user,
        budget=budget,
        name=name,
        account_type=data.get("account_type") or AccountType.CASH,
        starting_balance=data.get("starting_balance") or ZERO,
        display_order=next_order + 1,
    )
    if account.is_credit:
        account.payment_category = _create_payment_category(account, context)
        account.save(update_fields=["payment_category", "updated_at"])
    account_balances.recompute(account)

    logger.info(
        "Account created",
        extra={
            "account_id": str(account.pk),
            "budget_id": str(budget.pk),
            "account_type": account.account_type,
            "action": "account_created",
            "component": "Accounts",
        },
    )
    return AccountResult(account=account, ready_to_assign=ready_to_assign.for_context(budget, context))


def list_accounts(user, budget_id):
    budget = store.get_budget(user, budget_id)
    return Account.objects.filter(budget=budget, user=user)


@transaction.atomic
def update_account(user, account_id, changes: dict, context: MonthContext) -> AccountResult:
    account = store.get_account(user, account_id)
    budget = store.lock_budget(user, account.budget_id)

    updated = []
    name = (changes.get("name") or "").strip()
    if name and name != account.name:
        _ensure_unique_name(budget, name, exclude_id=account.pk)
        account.name = name
        updated.append("name")
        if account.payment_category is not None:
            account.payment_category.name = payment_category_name(name)
            account.payment_category.save(update_fields=["name"])
    if changes.get("display_order") is not None:
        account.display_order = changes["display_order"]
        updated.append("display_order")
    if changes.get("starting_balance") is not None:
        account.starting_balance = changes["starting_balance"]
        updated.append("starting_balance")

    if updated:
        account.save(update_fields=[*updated, "updated_at"])
    if "starting_balance" in updated:
        account_balances.recompute(account)

    return AccountResult(account=account, ready_to_assign=ready_to_assign.for_context(budget, context))


def _adjust(user, account: Account, amount: Decimal, payee: str, memo: str, context: MonthContext,
            reconciled: bool = False) -> Transaction | None:
    if not amount:
        return None
    result = transaction_lifecycle.create_transaction(
        user,
        {
            "account_id": account.pk,
            "date": context.today,
            "amount": amount,
            "payee": payee,
            "memo": memo,
            "category_id": None,
            "is_cleared": True,
            "is_reconciled": reconciled,
            "is_adjustment": True,
        },
        context,
    )
    account.refresh_from_db()
    return result.transaction


def _adjustment_memo(prefix: str, amount: Decimal) -> str:
    verb = "Added" if amount > 0 else "Removed"
    return f"{prefix}: {verb} {abs(amount):.2f}"


@transaction.atomic
def close_account(user, account_id, context: MonthContext) -> AccountResult:
    """Zero the account with an adjustment transaction and mark it closed."""
    account = store.get_account(user, account_id)
    budget = store.lock_budget(user, account.budget_id)
    if not account.is_active:
        raise ConflictError("Account is already closed.")

    amount = -account.working_balance
    adjustment = _adjust(
        user, account, amount, CLOSURE_PAYEE, _adjustment_memo("Account closure adjustment", amount), context
    )
    account.is_active = False
    account.save(update_fields=["is_active", "updated_at"])

    logger.info(
        "Account closed",
        extra={
            "account_id": str(account.pk),
            "adjustment": str(amount),
            "action": "account_closed",
            "component": "Accounts",
        },
    )
    return AccountResult(
        account=account,
        ready_to_assign=ready_to_assign.for_context(budget, context),
        adjustment_transaction=adjustment,
    )


@transaction.atomic
def reopen_account(user, account_id, context: MonthContext) -> AccountResult:
    account = store.get_account(user, account_id)
    budget = store.lock_budget(user, account.budget_id)
    if account.is_active:
        raise ConflictError("Account is already active.")
    account.is_active = True
    account.save(update_fields=["is_active", "updated_at"])
    return AccountResult(account=account, ready_to_assign=ready_to_assign.for_context(budget, context))


@transaction.atomic
def reconcile_account(user, account_id, actual_balance: Decimal, context: MonthContext) -> AccountResult:
    """Match the cleared balance to the bank's figure and lock in cleared transactions."""
    account = store.get_account(user, account_id)
    budget = store.lock_budget(user, account.budget_id)

    amount = actual_balance - account.cleared_balance
    adjustment = _adjust(
        user,
        account,
        amount,
        RECONCILIATION_PAYEE,
        _adjustment_memo("Reconciliation adjustment", amount),
        context,
        reconciled=True,
    )
    marked = store.account_transactions(account).filter(is_cleared=True, is_reconciled=False).update(
        is_reconciled=True
    )

    logger.info(
        "Account reconciled",
        extra={
            "account_id": str(account.pk),
            "adjustment": str(amount),
            "marked_reconciled": marked,
            "action": "account_reconciled",
            "component": "Accounts",
        },
    )
    return AccountResult(
        account=account,
        ready_to_assign=ready_to_assign.for_context(budget, context),
        adjustment_transaction=adjustment,
    )


@transaction.atomic
def update_tracking_balance(user, account_id, new_balance: Decimal, memo: str, context: MonthContext) -> AccountResult:
    account = store.get_account(user, account_id)
    budget = store.lock_budget(user, account.budget_id)
    if account.account_type != AccountType.TRACKING:
        raise ValidationError("Balance updates are only allowed for tracking accounts.")

    amount = new_balance - account.working_balance
    adjustment = _adjust(user, account, amount, BALANCE_UPDATE_PAYEE, memo or "Balance update", context)
    return AccountResult(
        account=account,
        ready_to_assign=ready_to_assign.for_context(budget, context),
        adjustment_transaction=adjustment,
    )
