from __future__ import annotations

import logging

from django.db import models, transaction

from . import store
from .models import Account, ZERO

logger = logging.getLogger(__name__)


@transaction.atomic
def recompute(account: Account) -> Account:
    """Rebuild cleared, uncleared and working balances from the account's transactions.

    cleared = starting balance + cleared transactions
    uncleared = uncleared transactions
    working = cleared + uncleared
    """
    totals = store.account_transactions(account).aggregate(
        cleared=models.Sum("amount", filter=models.Q(is_cleared=True)),
        uncleared=models.Sum("amount", filter=models.Q(is_cleared=False)),
    )
    cleared_sum = totals["cleared"] or ZERO
    uncleared_sum = totals["uncleared"] or ZERO

    account.cleared_balance = account.starting_balance + cleared_sum
    account.uncleared_balance = uncleared_sum
    account.working_balance = account.cleared_balance + account.uncleared_balance
    account.save(update_fields=["cleared_balance", "uncleared_balance", "working_balance", "updated_at"])

    logger.debug(
        "Account balances recomputed",
        extra={
            "account_id": str(account.pk),
            "cleared": str(account.cleared_balance),
            "uncleared": str(account.uncleared_balance),
            "working": str(account.working_balance),
            "action": "account_balances_recomputed",
            "component": "AccountBalanceProjector",
        },
    )
    return account


def recompute_all(accounts) -> int:
    count = 0
    for account in accounts:
        recompute(account)
        count += 1
    return count
