from __future__ import annotations

from decimal import Decimal

from .models import ZERO

CENT = Decimal("0.01")


def money(value) -> str:
    return str(Decimal(value or 0).quantize(CENT))


def budget_to_dict(budget) -> dict:
    return {
        "id": budget.pk,
        "name": budget.name,
        "currency": budget.currency,
        "currency_placement": budget.currency_placement,
        "number_format": budget.number_format,
        "date_format": budget.date_format,
        "theme": budget.theme,
        "created_at": budget.created_at,
        "updated_at": budget.updated_at,
    }


def account_to_dict(account) -> dict:
    return {
        "id": account.pk,
        "budget_id": account.budget_id,
        "name": account.name,
        "account_type": account.account_type,
        "starting_balance": money(account.starting_balance),
        "cleared_balance": money(account.cleared_balance),
        "uncleared_balance": money(account.uncleared_balance),
        "working_balance": money(account.working_balance),
        "is_active": account.is_active,
        "display_order": account.display_order,
        "payment_category_id": account.payment_category_id,
    }


def category_group_to_dict(group) -> dict:
    return {
        "id": group.pk,
        "budget_id": group.budget_id,
        "name": group.name,
        "display_order": group.display_order,
        "is_system_group": group.is_system_group,
    }


def balance_to_dict(balance) -> dict | None:
    if balance is None:
        return None
    return {
        "id": balance.pk,
        "category_id": balance.category_id,
        "budget_id": balance.budget_id,
        "year": balance.year,
        "month": balance.month,
        "assigned": money(balance.assigned),
        "activity": money(balance.activity),
        "available": money(balance.available),
    }


def category_to_dict(category, balance=None) -> dict:
    return {
        "id": category.pk,
        "budget_id": category.budget_id,
        "category_group_id": category.category_group_id,
        "name": category.name,
        "display_order": category.display_order,
        "is_credit_card_payment": category.is_credit_card_payment,
        "linked_account_id": category.linked_account_id,
        "assigned": money(balance.assigned if balance else ZERO),
        "activity": money(balance.activity if balance else ZERO),
        "available": money(balance.available if balance else ZERO),
    }


def transaction_to_dict(tx) -> dict | None:
    if tx is None:
        return None
    return {
        "id": tx.pk,
        "budget_id": tx.budget_id,
        "account_id": tx.account_id,
        "category_id": tx.category_id,
        "date": tx.date,
        "amount": money(tx.amount),
        "memo": tx.memo,
        "payee": tx.payee,
        "is_cleared": tx.is_cleared,
        "is_reconciled": tx.is_reconciled,
        "transfer_id": tx.transfer_id,
        "created_at": tx.created_at,
        "updated_at": tx.updated_at,
    }


def debt_summary_to_dict(summary: dict) -> dict:
    def totals(part):
        return {
            "total_debt": money(part["total_debt"]),
            "total_covered": money(part["total_covered"]),
            "total_uncovered": money(part["total_uncovered"]),
            "debt_count": part["debt_count"],
        }

    return {
        "category_id": summary["category_id"],
        "as_spending_category": totals(summary["as_spending_category"]),
        "as_payment_category": totals(summary["as_payment_category"]),
    }


def auto_assign_item_to_dict(item) -> dict:
    return {
        "id": item.pk,
        "name": item.name,
        "budget_id": item.budget_id,
        "category_id": item.category_id,
        "amount": money(item.amount),
    }


def transaction_result_to_dict(result) -> dict:
    data = {
        "transaction": transaction_to_dict(result.transaction),
        "accounts": [account_to_dict(a) for a in result.accounts],
        "readyToAssign": money(result.ready_to_assign),
    }
    if result.linked_transaction is not None:
        data["linkedTransaction"] = transaction_to_dict(result.linked_transaction)
    return data


def payee_to_dict(payee) -> dict:
    return {
        "id": payee.pk,
        "budget_id": payee.budget_id,
        "name": payee.name,
        "normalized_name": payee.normalized_name,
        "last_category_id": payee.last_category_id,
        "last_used_at": payee.last_used_at,
        "is_transfer": payee.is_transfer,
    }


def scheduled_transaction_to_dict(schedule) -> dict:
    return {
        "id": schedule.pk,
        "budget_id": schedule.budget_id,
        "account_id": schedule.account_id,
        "category_id": schedule.category_id,
        "payee": schedule.payee,
        "amount": money(schedule.amount),
        "memo": schedule.memo,
        "frequency": schedule.frequency,
        "specific_date": schedule.specific_date,
        "day_of_month": schedule.day_of_month,
        "day_of_week": schedule.day_of_week,
        "month_of_year": schedule.month_of_year,
        "is_active": schedule.is_active,
        "last_created_date": schedule.last_created_date,
    }


def net_worth_to_dict(snapshot) -> dict:
    return {
        "month_date": snapshot.month_date,
        "total_assets": money(snapshot.total_assets),
        "total_liabilities": money(snapshot.total_liabilities),
        "net_worth": money(snapshot.net_worth),
        "note": snapshot.note,
    }
