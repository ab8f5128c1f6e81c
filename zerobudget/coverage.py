"""Credit card coverage.

Spending on a credit card moves, up to the outflow amount, whatever the
spending category can absorb into the card's payment category, and records
the outflow in the debt ledger. Money assigned later to a spending category
with uncovered debt flows on to the payment categories, oldest debt first.

Coverage is an overlay on top of the transaction itself: callers run it
inside ``coverage_guard`` so a failure here is logged and rolled back
without failing the outer operation.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal

from django.db import transaction as db_transaction

from . import category_activity, debt_ledger, store
from .dates import MonthContext
from .models import Category, CreditCardDebt, Transaction, ZERO

logger = logging.getLogger(__name__)


@contextmanager
def coverage_guard(action: str, **ids):
    try:
        with db_transaction.atomic():
            yield
    except Exception as e:
        logger.exception(
            "Credit card coverage failed",
            extra={
                **{key: str(value) for key, value in ids.items()},
                "error": str(e),
                "action": action,
                "component": "CreditCardCoverage",
                "severity": "high",
            },
        )


def _payment_category(tx: Transaction) -> Category | None:
    payment = tx.account.payment_category
    if payment is None:
        logger.warning(
            "Credit account has no payment category",
            extra={
                "account_id": str(tx.account_id),
                "transaction_id": str(tx.pk),
                "action": "payment_category_missing",
                "component": "CreditCardCoverage",
            },
        )
    return payment


def cover_new_outflow(tx: Transaction, available_before: Decimal, context: MonthContext) -> CreditCardDebt | None:
    """Record a new credit card outflow and cover what the spending category can absorb.

    ``available_before`` is the spending category's current-month available
    before this transaction's own amount was applied to it.
    """
    payment = _payment_category(tx)
    if payment is None:
        return None

    debt = -tx.amount
    covered = ZERO
    if tx.category_id is not None:
        covered = min(debt, max(ZERO, available_before))

    row = debt_ledger.create(
        tx,
        tx.category,
        payment,
        tx.account,
        tx.budget,
        debt=debt,
        covered=covered,
    )
    if covered > 0:
        category_activity.apply_current_month(payment, covered, context)

    logger.info(
        "Credit card outflow covered",
        extra={
            "transaction_id": str(tx.pk),
            "payment_category_id": str(payment.pk),
            "debt": str(debt),
            "covered": str(covered),
            "action": "coverage_created",
            "component": "CreditCardCoverage",
        },
    )
    return row


def sync_outflow_coverage(
    tx: Transaction,
    context: MonthContext,
    pre_update_available: Decimal,
    available_before_delta: Decimal,
) -> CreditCardDebt | None:
    """Bring the debt row of an edited transaction in line with its new state.

    The old coverage is taken back from the payment category it was given
    to. If the transaction is still a credit card outflow, coverage is
    recomputed: in the same spending category it may reuse what it covered
    before plus the category's surplus as it stood before the edit
    (``pre_update_available``); in a different category only that
    category's own available before the new amount is used
    (``available_before_delta``). Otherwise the row is dropped.
    """
    existing = store.debt_for_transaction(tx)
    if existing is not None and existing.covered_amount > 0:
        category_activity.apply_current_month(existing.payment_category, -existing.covered_amount, context)

    if not tx.is_credit_outflow:
        if existing is not None:
            existing.delete()
            logger.info(
                "Credit card debt released",
                extra={
                    "transaction_id": str(tx.pk),
                    "action": "coverage_removed",
                    "component": "CreditCardCoverage",
                },
            )
        return None

    if existing is None:
        return cover_new_outflow(tx, available_before_delta, context)

    payment = _payment_category(tx)
    if payment is None:
        existing.delete()
        return None

    debt = -tx.amount
    if tx.category_id is None:
        bound = ZERO
    elif existing.original_category_id == tx.category_id:
        bound = existing.covered_amount + max(ZERO, pre_update_available)
    else:
        bound = max(ZERO, available_before_delta)
    covered = min(debt, bound)

    existing.debt_amount = debt
    existing.covered_amount = covered
    existing.original_category = tx.category
    existing.payment_category = payment
    existing.credit_card_account = tx.account
    existing.save(
        update_fields=[
            "debt_amount",
            "covered_amount",
            "original_category",
            "payment_category",
            "credit_card_account",
        ]
    )
    if covered > 0:
        category_activity.apply_current_month(payment, covered, context)

    logger.info(
        "Credit card coverage updated",
        extra={
            "transaction_id": str(tx.pk),
            "payment_category_id": str(payment.pk),
            "debt": str(debt),
            "covered": str(covered),
            "action": "coverage_updated",
            "component": "CreditCardCoverage",
        },
    )
    return existing


def release_outflow_coverage(tx: Transaction, context: MonthContext) -> None:
    row = store.debt_for_transaction(tx)
    if row is None:
        return
    if row.covered_amount > 0:
        category_activity.apply_current_month(row.payment_category, -row.covered_amount, context)
    row.delete()
    logger.info(
        "Credit card coverage released",
        extra={
            "transaction_id": str(tx.pk),
            "released": str(row.covered_amount),
            "action": "coverage_released",
            "component": "CreditCardCoverage",
        },
    )


def apply_assignment_coverage(category: Category, amount: Decimal, year: int, month: int) -> Decimal:
    """Flow newly assigned money in ``category`` to payment categories of its uncovered debt.

    The spending category's own balance is left alone. Returns the total moved.
    """
    remaining = amount
    for row in debt_ledger.uncovered_for_category(category):
        if remaining <= 0:
            break
        move = min(remaining, row.uncovered_amount)
        category_activity.apply_to_month(row.payment_category, move, year, month)
        remaining -= debt_ledger.add_coverage(row, move)

    moved = amount - remaining
    if moved > 0:
        logger.info(
            "Assignment covered credit card debt",
            extra={
                "category_id": str(category.pk),
                "assigned": str(amount),
                "moved": str(moved),
                "action": "assignment_coverage_applied",
                "component": "CreditCardCoverage",
            },
        )
    return moved
