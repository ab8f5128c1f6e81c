from __future__ import annotations

import logging
from decimal import Decimal

from . import store
from .dates import MonthContext
from .models import Budget

logger = logging.getLogger(__name__)


def calculate(budget: Budget, year: int, month: int) -> Decimal:
    """Money in cash accounts that no category is holding.

    Only positive category balances are subtracted: overspent dollars have
    already left the cash accounts. When the month has no balance rows yet
    the most recent month that does is used.
    """
    cash = store.cash_working_total(budget)

    period = (year, month)
    if not store.has_balances_in(budget, year, month):
        period = store.latest_balance_period(budget) or period
    held = store.positive_available_total(budget, *period)

    rta = cash - held
    logger.debug(
        "Ready to assign calculated",
        extra={
            "budget_id": str(budget.pk),
            "period": f"{period[0]}-{period[1]:02d}",
            "cash": str(cash),
            "held": str(held),
            "ready_to_assign": str(rta),
            "action": "ready_to_assign_calculated",
            "component": "ReadyToAssign",
        },
    )
    return rta


def for_context(budget: Budget, context: MonthContext) -> Decimal:
    return calculate(budget, context.year, context.month)
