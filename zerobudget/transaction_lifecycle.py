"""Create, update, delete and clear transactions.

Every write runs in one database transaction, holding the budget lock, and
applies its effects in a fixed order: category activity, then credit card
coverage, then account balances. Ready to Assign is recalculated at the end.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction

from . import account_balances, category_activity, coverage, debt_ledger, payees, ready_to_assign, store
from .dates import MonthContext
from .models import (
    Account,
    AccountType,
    Budget,
    Category,
    READY_TO_ASSIGN,
    Transaction,
    ZERO,
)

logger = logging.getLogger(__name__)

TRANSFER_PREFIX = "Transfer : "

SYNCED_TRANSFER_FIELDS = ("date", "amount", "memo", "is_cleared")


@dataclass
class TransactionResult:
    transaction: Transaction | None
    ready_to_assign: Decimal
    accounts: list[Account] = field(default_factory=list)
    linked_transaction: Transaction | None = None


def is_transfer_payee(payee: str | None) -> bool:
    return bool(payee) and payee.startswith(TRANSFER_PREFIX)


def _resolve_category(user, category_id, budget_id) -> Category | None:
    if category_id in (None, "", READY_TO_ASSIGN):
        return None
    category = store.get_category(user, category_id)
    if category.budget_id != budget_id:
        raise ValidationError({"category_id": ["Category belongs to a different budget."]})
    return category


def _transfer_target(source: Account, payee: str) -> Account:
    name = payee[len(TRANSFER_PREFIX):].strip()
    target = (
        Account.objects.select_related("payment_category")
        .filter(budget_id=source.budget_id, user=source.user_id, name__iexact=name, is_active=True)
        .exclude(pk=source.pk)
        .first()
    )
    if target is None:
        raise ValidationError({"payee": [f"No open account named '{name}' to transfer to."]})
    return target


def _spending_available(category: Category | None, context: MonthContext) -> Decimal:
    if category is None:
        return ZERO
    return store.category_available(category, context.year, context.month)


def _create_one(user, account: Account, category: Category | None, values: dict, context: MonthContext) -> Transaction:
    context.ensure_not_future(values["date"])

    tx = Transaction.objects.create(
        user=user,
        budget_id=account.budget_id,
        account=account,
        category=category,
        date=values["date"],
        amount=values["amount"],
        memo=values.get("memo") or "",
        payee=values.get("payee") or "",
        is_cleared=values.get("is_cleared") or False,
        is_reconciled=values.get("is_reconciled") or False,
        transfer_id=values.get("transfer_id"),
    )

    if not values.get("is_adjustment"):
        payees.record_use(tx, is_transfer=values.get("transfer_id") is not None)

    available_before = _spending_available(category, context) if tx.is_credit_outflow else ZERO
    if category is not None and tx.amount:
        category_activity.apply_delta(category, tx.amount, tx.date, context)

    if tx.is_credit_outflow and not values.get("is_adjustment"):
        with coverage.coverage_guard("coverage_create_failed", transaction_id=tx.pk):
            coverage.cover_new_outflow(tx, available_before, context)

    account_balances.recompute(account)

    logger.info(
        "Transaction created",
        extra={
            "transaction_id": str(tx.pk),
            "account_id": str(account.pk),
            "category_id": str(tx.category_id) if tx.category_id else None,
            "amount": str(tx.amount),
            "date": tx.date.isoformat(),
            "action": "transaction_created",
            "component": "TransactionLifecycle",
        },
    )
    return tx


@db_transaction.atomic
def create_transaction(user, data: dict, context: MonthContext) -> TransactionResult:
    """Create a transaction; a ``Transfer : <account>`` payee also creates the other side.

    Balance adjustments pass ``is_adjustment=True``: a credit card outflow
    they post stays out of the debt ledger and their payee is not remembered.
    """
    account = store.get_account(user, data["account_id"])
    budget = store.lock_budget(user, account.budget_id)
    category = _resolve_category(user, data.get("category_id"), account.budget_id)

    values = dict(data)
    target = None
    if is_transfer_payee(values.get("payee")):
        target = _transfer_target(account, values["payee"])
        if (
            category is None
            and account.account_type == AccountType.CASH
            and target.account_type == AccountType.TRACKING
        ):
            raise ValidationError(
                {"category_id": ["A transfer from a cash account to a tracking account needs a category."]}
            )
        values["transfer_id"] = uuid.uuid4()
        values["amount"] = -abs(values["amount"])

    tx = _create_one(user, account, category, values, context)
    accounts = [account]

    linked = None
    if target is not None:
        linked = _create_one(
            user,
            target,
            None,
            {
                "date": tx.date,
                "amount": -tx.amount,
                "memo": tx.memo,
                "payee": f"{TRANSFER_PREFIX}{account.name}",
                "is_cleared": tx.is_cleared,
                "transfer_id": tx.transfer_id,
            },
            context,
        )
        accounts.append(target)

    return TransactionResult(
        transaction=tx,
        ready_to_assign=ready_to_assign.for_context(budget, context),
        accounts=accounts,
        linked_transaction=linked,
    )


def _update_one(user, tx: Transaction, changes: dict, context: MonthContext) -> list[Account]:
    old_account = tx.account
    old_amount = tx.amount
    old_category = tx.category
    old_date = tx.date
    was_credit_outflow = tx.is_credit_outflow

    if "account_id" in changes and changes["account_id"] != tx.account_id:
        new_account = store.get_account(user, changes["account_id"])
        if new_account.budget_id != tx.budget_id:
            raise ValidationError({"account_id": ["Transactions cannot move to an account in another budget."]})
        tx.account = new_account
    if "category_id" in changes:
        tx.category = _resolve_category(user, changes["category_id"], tx.budget_id)
    for name in ("date", "amount", "memo", "payee", "is_cleared", "is_reconciled"):
        if name in changes and changes[name] is not None:
            setattr(tx, name, changes[name])
    if "date" in changes:
        context.ensure_not_future(tx.date)
    if changes.get("payee"):
        payees.record_use(tx, is_transfer=tx.transfer_id is not None)

    money_changed = (
        tx.account_id != old_account.pk
        or tx.amount != old_amount
        or tx.category_id != (old_category.pk if old_category else None)
        or tx.date != old_date
    )
    if not money_changed:
        tx.save()
        account_balances.recompute(tx.account)
        return [tx.account]

    pre_update_available = _spending_available(tx.category, context)
    if old_category is not None and old_amount:
        category_activity.reverse_delta(old_category, old_amount, old_date, context)
    available_before_delta = _spending_available(tx.category, context)

    tx.save()
    if tx.category is not None and tx.amount:
        category_activity.apply_delta(tx.category, tx.amount, tx.date, context)

    if was_credit_outflow or tx.is_credit_outflow:
        with coverage.coverage_guard("coverage_update_failed", transaction_id=tx.pk):
            coverage.sync_outflow_coverage(tx, context, pre_update_available, available_before_delta)

    touched = [account_balances.recompute(tx.account)]
    if old_account.pk != tx.account_id:
        touched.append(account_balances.recompute(old_account))

    logger.info(
        "Transaction updated",
        extra={
            "transaction_id": str(tx.pk),
            "old_amount": str(old_amount),
            "new_amount": str(tx.amount),
            "old_category_id": str(old_category.pk) if old_category else None,
            "new_category_id": str(tx.category_id) if tx.category_id else None,
            "action": "transaction_updated",
            "component": "TransactionLifecycle",
        },
    )
    return touched


def _lock_transaction(user, transaction_id) -> tuple[Budget, Transaction]:
    """Lock the owning budget first, then the transaction row."""
    budget_id = store.get_transaction(user, transaction_id).budget_id
    budget = store.lock_budget(user, budget_id)
    return budget, store.get_transaction(user, transaction_id, lock=True)


def _linked_transaction(tx: Transaction) -> Transaction | None:
    if tx.transfer_id is None:
        return None
    linked = (
        Transaction.objects.select_related("account", "account__payment_category", "category")
        .filter(transfer_id=tx.transfer_id, user=tx.user_id)
        .exclude(pk=tx.pk)
        .first()
    )
    return linked


@db_transaction.atomic
def update_transaction(user, transaction_id, changes: dict, context: MonthContext) -> TransactionResult:
    budget, tx = _lock_transaction(user, transaction_id)

    accounts = _update_one(user, tx, changes, context)

    linked = _linked_transaction(tx)
    if linked is not None:
        linked_changes = {}
        for name in SYNCED_TRANSFER_FIELDS:
            if name in changes:
                linked_changes[name] = -tx.amount if name == "amount" else getattr(tx, name)
        if linked_changes:
            accounts += _update_one(user, linked, linked_changes, context)

    return TransactionResult(
        transaction=tx,
        ready_to_assign=ready_to_assign.for_context(budget, context),
        accounts=accounts,
        linked_transaction=linked,
    )


def _delete_one(tx: Transaction, context: MonthContext) -> Account:
    if tx.category is not None and tx.amount:
        category_activity.reverse_delta(tx.category, tx.amount, tx.date, context)

    if tx.is_credit_outflow:
        with coverage.coverage_guard("coverage_delete_failed", transaction_id=tx.pk):
            coverage.release_outflow_coverage(tx, context)
    debt_ledger.delete_by_transaction(tx)

    account = tx.account
    tx_id = tx.pk
    tx.delete()
    account_balances.recompute(account)

    logger.info(
        "Transaction deleted",
        extra={
            "transaction_id": str(tx_id),
            "account_id": str(account.pk),
            "action": "transaction_deleted",
            "component": "TransactionLifecycle",
        },
    )
    return account


@db_transaction.atomic
def delete_transaction(user, transaction_id, context: MonthContext) -> TransactionResult:
    budget, tx = _lock_transaction(user, transaction_id)

    linked = _linked_transaction(tx)
    accounts = [_delete_one(tx, context)]
    if linked is not None:
        accounts.append(_delete_one(linked, context))

    return TransactionResult(
        transaction=None,
        ready_to_assign=ready_to_assign.for_context(budget, context),
        accounts=accounts,
    )


@db_transaction.atomic
def toggle_cleared(user, transaction_id, context: MonthContext) -> TransactionResult:
    budget, tx = _lock_transaction(user, transaction_id)

    tx.is_cleared = not tx.is_cleared
    tx.save(update_fields=["is_cleared", "updated_at"])
    account = account_balances.recompute(tx.account)

    return TransactionResult(
        transaction=tx,
        ready_to_assign=ready_to_assign.for_context(budget, context),
        accounts=[account],
    )


def transactions_for_account(user, account_id):
    account = store.get_account(user, account_id)
    return store.account_transactions(account).select_related("category")


def transactions_for_budget(user, budget_id):
    budget = store.get_budget(user, budget_id)
    return Transaction.objects.filter(budget=budget, user=user).select_related("account", "category")
