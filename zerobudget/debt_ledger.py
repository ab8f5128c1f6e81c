from __future__ import annotations

import logging
from decimal import Decimal

from django.db import models

from . import store
from .models import Account, Budget, Category, CreditCardDebt, Transaction, ZERO

logger = logging.getLogger(__name__)


def create(
    transaction: Transaction,
    spending_category: Category | None,
    payment_category: Category,
    credit_account: Account,
    budget: Budget,
    debt: Decimal,
    covered: Decimal,
) -> CreditCardDebt:
    if debt <= 0:
        raise ValueError("Debt amount must be positive.")
    covered = min(max(covered, ZERO), debt)
    return CreditCardDebt.objects.create(
        user_id=transaction.user_id,
        budget=budget,
        transaction=transaction,
        credit_card_account=credit_account,
        original_category=spending_category,
        payment_category=payment_category,
        debt_amount=debt,
        covered_amount=covered,
    )


def uncovered_for_category(category: Category) -> list[CreditCardDebt]:
    """Rows for spending in ``category`` that are not fully covered, oldest first."""
    return list(
        store.debts_for_spending_category(category)
        .filter(covered_amount__lt=models.F("debt_amount"))
        .select_related("payment_category")
        .select_for_update(of=("self",))
    )


def add_coverage(row: CreditCardDebt, amount: Decimal) -> Decimal:
    """Raise ``covered_amount`` by up to ``amount``; return how much was actually added."""
    applied = min(amount, row.debt_amount - row.covered_amount)
    if applied <= 0:
        return ZERO
    row.covered_amount += applied
    row.save(update_fields=["covered_amount"])
    return applied


def delete_by_transaction(transaction: Transaction) -> int:
    deleted, _ = CreditCardDebt.objects.filter(transaction=transaction, user=transaction.user_id).delete()
    return deleted


def _totals(qs) -> dict:
    totals = qs.aggregate(
        debt=models.Sum("debt_amount"),
        covered=models.Sum("covered_amount"),
        rows=models.Count("id"),
    )
    debt = totals["debt"] or ZERO
    covered = totals["covered"] or ZERO
    return {
        "total_debt": debt,
        "total_covered": covered,
        "total_uncovered": debt - covered,
        "debt_count": totals["rows"],
    }


def summary_for_spending_category(category: Category) -> dict:
    return _totals(CreditCardDebt.objects.filter(original_category=category, user=category.user_id))


def summary_for_payment_category(category: Category) -> dict:
    return _totals(CreditCardDebt.objects.filter(payment_category=category, user=category.user_id))


def summary(category: Category) -> dict:
    return {
        "category_id": category.pk,
        "as_spending_category": summary_for_spending_category(category),
        "as_payment_category": summary_for_payment_category(category),
    }
