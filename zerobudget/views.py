from django.core.exceptions import ValidationError
from django.http import HttpRequest
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import (
    accounts,
    assignments,
    auto_assign,
    budgets,
    categories,
    category_balances,
    category_groups,
    debt_ledger,
    net_worth,
    payees,
    ready_to_assign,
    scheduled_transactions,
    store,
    transaction_lifecycle,
)
from .api import api_endpoint, month_params, respond
from .forms import (
    AccountForm,
    AccountUpdateForm,
    ApplyAutoAssignForm,
    AutoAssignForm,
    AutoAssignUpdateForm,
    BudgetForm,
    CategoryBalanceUpdateForm,
    CategoryForm,
    CategoryGroupForm,
    CategoryGroupReorderForm,
    CategoryGroupUpdateForm,
    CategoryReorderForm,
    CategoryUpdateForm,
    MoveMoneyForm,
    MoveToReadyToAssignForm,
    NetWorthNoteForm,
    NetWorthSnapshotForm,
    PayeeForm,
    PullFromReadyToAssignForm,
    ReconcileForm,
    ScheduledTransactionForm,
    ScheduledTransactionUpdateForm,
    TrackingBalanceForm,
    TransactionForm,
    TransactionUpdateForm,
    UnhideCategoryForm,
)
from .serializers import (
    account_to_dict,
    auto_assign_item_to_dict,
    balance_to_dict,
    budget_to_dict,
    category_group_to_dict,
    category_to_dict,
    debt_summary_to_dict,
    money,
    net_worth_to_dict,
    payee_to_dict,
    scheduled_transaction_to_dict,
    transaction_result_to_dict,
    transaction_to_dict,
)


def _required_param(request: HttpRequest, name: str) -> str:
    value = request.GET.get(name) or request.payload.get(name)
    if not value:
        raise ValidationError({name: ["This parameter is required."]})
    return value


def _account_result(result) -> dict:
    data = {"account": account_to_dict(result.account), "readyToAssign": money(result.ready_to_assign)}
    if result.adjustment_transaction is not None:
        data["adjustmentTransaction"] = transaction_to_dict(result.adjustment_transaction)
    return data


# Budgets


@method_decorator(api_endpoint, name="dispatch")
class BudgetCollectionView(View):
    def get(self, request):
        return respond([budget_to_dict(b) for b in budgets.list_budgets(request.user)])

    def post(self, request):
        data = BudgetForm.parse(request.payload)
        budget = budgets.create_budget(request.user, data)
        return respond(budget_to_dict(budget), status=201)


@method_decorator(api_endpoint, name="dispatch")
class BudgetDetailView(View):
    def get(self, request, pk):
        return respond(budget_to_dict(store.get_budget(request.user, pk)))

    def patch(self, request, pk):
        changes = BudgetForm.parse(request.payload, partial=True)
        return respond(budget_to_dict(budgets.update_budget(request.user, pk, changes)))

    def delete(self, request, pk):
        budgets.delete_budget(request.user, pk)
        return respond({"success": True})


@require_GET
@api_endpoint
def ready_to_assign_view(request, budget_id):
    budget = store.get_budget(request.user, budget_id)
    return respond({"readyToAssign": money(ready_to_assign.for_context(budget, request.month_context))})


# Accounts


@method_decorator(api_endpoint, name="dispatch")
class AccountCollectionView(View):
    def get(self, request):
        budget_id = _required_param(request, "budgetId")
        return respond([account_to_dict(a) for a in accounts.list_accounts(request.user, budget_id)])

    def post(self, request):
        data = AccountForm.parse(request.payload)
        result = accounts.create_account(request.user, data, request.month_context)
        return respond(_account_result(result), status=201)


@method_decorator(api_endpoint, name="dispatch")
class AccountDetailView(View):
    def get(self, request, pk):
        return respond(account_to_dict(store.get_account(request.user, pk)))

    def patch(self, request, pk):
        changes = AccountUpdateForm.parse(request.payload, partial=True)
        result = accounts.update_account(request.user, pk, changes, request.month_context)
        return respond(_account_result(result))


@require_POST
@api_endpoint
def account_close_view(request, pk):
    return respond(_account_result(accounts.close_account(request.user, pk, request.month_context)))


@require_POST
@api_endpoint
def account_reopen_view(request, pk):
    return respond(_account_result(accounts.reopen_account(request.user, pk, request.month_context)))


@require_POST
@api_endpoint
def account_reconcile_view(request, pk):
    data = ReconcileForm.parse(request.payload)
    result = accounts.reconcile_account(request.user, pk, data["actual_balance"], request.month_context)
    return respond(_account_result(result))


@require_POST
@api_endpoint
def account_tracking_balance_view(request, pk):
    data = TrackingBalanceForm.parse(request.payload)
    result = accounts.update_tracking_balance(request.user, pk, data["balance"], data["memo"], request.month_context)
    return respond(_account_result(result))


# Category groups


@method_decorator(api_endpoint, name="dispatch")
class CategoryGroupCollectionView(View):
    def get(self, request):
        budget_id = _required_param(request, "budgetId")
        groups = category_groups.list_groups(request.user, budget_id)
        return respond([category_group_to_dict(g) for g in groups])

    def post(self, request):
        data = CategoryGroupForm.parse(request.payload)
        return respond(category_group_to_dict(category_groups.create_group(request.user, data)), status=201)


@method_decorator(api_endpoint, name="dispatch")
class CategoryGroupDetailView(View):
    def patch(self, request, pk):
        changes = CategoryGroupUpdateForm.parse(request.payload, partial=True)
        return respond(category_group_to_dict(category_groups.update_group(request.user, pk, changes)))

    def delete(self, request, pk):
        category_groups.delete_group(request.user, pk)
        return respond({"success": True})


@require_http_methods(["PATCH"])
@api_endpoint
def category_group_hide_view(request, pk):
    moved = category_groups.hide_group(request.user, pk)
    return respond({"success": True, "movedCategories": moved})


@require_POST
@api_endpoint
def category_group_reorder_view(request):
    data = CategoryGroupReorderForm.parse(request.payload)
    groups = category_groups.reorder_groups(request.user, data["group_ids"])
    return respond({"success": True, "categoryGroups": [category_group_to_dict(g) for g in groups]})


# Categories


def _rows_to_dicts(rows):
    return [category_to_dict(row.category, row.balance) for row in rows]


@method_decorator(api_endpoint, name="dispatch")
class CategoryCollectionView(View):
    def get(self, request):
        group_id = _required_param(request, "categoryGroupId")
        year, month = month_params(request)
        return respond(_rows_to_dicts(categories.list_for_group(request.user, group_id, year, month)))

    def post(self, request):
        data = CategoryForm.parse(request.payload)
        context = request.month_context
        result = categories.create_category(request.user, data, context)
        balance = store.get_category_balance(result.category, context.year, context.month)
        return respond(
            {"category": category_to_dict(result.category, balance), "readyToAssign": money(result.ready_to_assign)},
            status=201,
        )


@require_GET
@api_endpoint
def categories_for_budget_view(request, budget_id):
    year, month = month_params(request)
    return respond(_rows_to_dicts(categories.list_for_budget(request.user, budget_id, year, month)))


@method_decorator(api_endpoint, name="dispatch")
class CategoryDetailView(View):
    def patch(self, request, pk):
        changes = CategoryUpdateForm.parse(request.payload, partial=True)
        result = assignments.update_category(request.user, pk, changes, request.month_context)
        balance = result.balance
        if balance is None:
            year, month = month_params(request)
            balance = store.get_category_balance(result.category, year, month)
        return respond(
            {
                "category": category_to_dict(result.category, balance),
                "categoryBalance": balance_to_dict(balance),
                "readyToAssign": money(result.ready_to_assign),
            }
        )

    def delete(self, request, pk):
        rta = categories.delete_category(request.user, pk, request.month_context)
        return respond({"success": True, "readyToAssign": money(rta)})


@require_POST
@api_endpoint
def category_reorder_view(request):
    data = CategoryReorderForm.parse(request.payload)
    ordered = categories.reorder_categories(request.user, data["category_ids"])
    return respond({"success": True, "order": [{"id": c.pk, "display_order": c.display_order} for c in ordered]})


def _visibility_response(request, result):
    context = request.month_context
    balance = store.get_category_balance(result.category, context.year, context.month)
    return respond({"category": category_to_dict(result.category, balance), "readyToAssign": money(result.ready_to_assign)})


@require_POST
@api_endpoint
def category_hide_view(request, pk):
    return _visibility_response(request, categories.hide_category(request.user, pk, request.month_context))


@require_POST
@api_endpoint
def category_unhide_view(request, pk):
    target = UnhideCategoryForm.parse(request.payload).get("targetGroupId")
    result = categories.unhide_category(request.user, pk, request.month_context, target_group_id=target)
    return _visibility_response(request, result)


def _move_response(result) -> dict:
    data = {
        "sourceCategoryBalance": balance_to_dict(result.source),
        "readyToAssign": money(result.ready_to_assign),
    }
    if result.destination is not None:
        data["destinationCategoryBalance"] = balance_to_dict(result.destination)
    return data


@require_POST
@api_endpoint
def move_money_view(request):
    data = MoveMoneyForm.parse(request.payload)
    result = assignments.move_money(
        request.user,
        data["sourceCategoryId"],
        data["destinationCategoryId"],
        data["amount"],
        request.month_context,
        year=data["year"],
        month=data["month"],
    )
    return respond(_move_response(result))


@require_POST
@api_endpoint
def move_to_ready_to_assign_view(request):
    data = MoveToReadyToAssignForm.parse(request.payload)
    result = assignments.move_to_ready_to_assign(
        request.user,
        data["sourceCategoryId"],
        data["amount"],
        request.month_context,
        year=data["year"],
        month=data["month"],
    )
    return respond(_move_response(result))


@require_POST
@api_endpoint
def pull_from_ready_to_assign_view(request):
    data = PullFromReadyToAssignForm.parse(request.payload)
    result = assignments.pull_from_ready_to_assign(
        request.user,
        data["destinationCategoryId"],
        data["amount"],
        request.month_context,
        year=data["year"],
        month=data["month"],
    )
    return respond(
        {"categoryBalance": balance_to_dict(result.source), "readyToAssign": money(result.ready_to_assign)}
    )


# Category balances


@method_decorator(api_endpoint, name="dispatch")
class CategoryBalanceView(View):
    def get(self, request, category_id):
        year, month = month_params(request)
        balance = category_balances.get_for_category(request.user, category_id, year, month)
        return respond(balance_to_dict(balance))

    def patch(self, request, category_id):
        changes = CategoryBalanceUpdateForm.parse(request.payload, partial=True)
        if "year" not in changes or "month" not in changes:
            changes["year"], changes["month"] = month_params(request)
        result = category_balances.update_for_category(request.user, category_id, changes, request.month_context)
        return respond(
            {"categoryBalance": balance_to_dict(result.balance), "readyToAssign": money(result.ready_to_assign)}
        )


@require_GET
@api_endpoint
def category_balances_for_budget_view(request, budget_id):
    year, month = month_params(request)
    rows = category_balances.list_for_budget(request.user, budget_id, year, month)
    return respond([balance_to_dict(b) for b in rows])


@require_POST
@api_endpoint
def ensure_category_balances_view(request, budget_id):
    year, month = month_params(request)
    created = category_balances.ensure_for_month(request.user, budget_id, year, month)
    return respond({"success": True, "created": created})


# Transactions


@require_POST
@api_endpoint
def transaction_create_view(request):
    data = TransactionForm.parse(request.payload)
    result = transaction_lifecycle.create_transaction(request.user, data, request.month_context)
    return respond(transaction_result_to_dict(result), status=201)


@require_GET
@api_endpoint
def transactions_for_account_view(request, account_id):
    rows = transaction_lifecycle.transactions_for_account(request.user, account_id)
    return respond([transaction_to_dict(tx) for tx in rows])


@require_GET
@api_endpoint
def transactions_for_budget_view(request, budget_id):
    rows = transaction_lifecycle.transactions_for_budget(request.user, budget_id)
    return respond([transaction_to_dict(tx) for tx in rows])


@method_decorator(api_endpoint, name="dispatch")
class TransactionDetailView(View):
    def get(self, request, pk):
        return respond(transaction_to_dict(store.get_transaction(request.user, pk)))

    def patch(self, request, pk):
        changes = TransactionUpdateForm.parse(request.payload, partial=True)
        result = transaction_lifecycle.update_transaction(request.user, pk, changes, request.month_context)
        return respond(transaction_result_to_dict(result))

    def delete(self, request, pk):
        result = transaction_lifecycle.delete_transaction(request.user, pk, request.month_context)
        return respond(transaction_result_to_dict(result))


@require_http_methods(["PATCH"])
@api_endpoint
def transaction_toggle_cleared_view(request, pk):
    result = transaction_lifecycle.toggle_cleared(request.user, pk, request.month_context)
    return respond(transaction_result_to_dict(result))


# Credit card debt


@require_GET
@api_endpoint
def debt_summary_view(request, category_id):
    category = store.get_category(request.user, category_id)
    return respond(debt_summary_to_dict(debt_ledger.summary(category)))


# Auto-assign


@require_POST
@api_endpoint
def auto_assign_create_view(request):
    data = AutoAssignForm.parse(request.payload)
    items = auto_assign.create_configuration(request.user, data["budget_id"], data["name"], data["items"])
    return respond({"name": data["name"], "items": [auto_assign_item_to_dict(i) for i in items]}, status=201)


@require_GET
@api_endpoint
def auto_assign_list_view(request, budget_id):
    summaries = auto_assign.list_configurations(request.user, budget_id)
    for summary in summaries:
        summary["total_amount"] = money(summary["total_amount"])
    return respond(summaries)


@method_decorator(api_endpoint, name="dispatch")
class AutoAssignConfigView(View):
    def get(self, request, budget_id, name):
        items = auto_assign.get_configuration(request.user, budget_id, name)
        return respond({"name": name, "items": [auto_assign_item_to_dict(i) for i in items]})

    def patch(self, request, budget_id, name):
        changes = AutoAssignUpdateForm.parse(request.payload, partial=True)
        items = auto_assign.update_configuration(
            request.user,
            budget_id,
            name,
            new_name=changes.get("name"),
            items=changes.get("items"),
        )
        new_name = changes.get("name") or name
        return respond({"name": new_name, "items": [auto_assign_item_to_dict(i) for i in items]})

    def delete(self, request, budget_id, name):
        auto_assign.delete_configuration(request.user, budget_id, name)
        return respond({"success": True})


@require_POST
@api_endpoint
def auto_assign_apply_view(request):
    data = ApplyAutoAssignForm.parse(request.payload)
    result = assignments.apply_auto_assign(
        request.user,
        data["budget_id"],
        data["name"],
        request.month_context,
        year=data["year"],
        month=data["month"],
    )
    result["readyToAssign"] = money(result["readyToAssign"])
    result["appliedCategories"] = [
        {"category_id": row["category_id"], "amount": money(row["amount"])} for row in result["appliedCategories"]
    ]
    return respond(result)


# Payees


@method_decorator(api_endpoint, name="dispatch")
class PayeeCollectionView(View):
    def get(self, request, budget_id):
        return respond([payee_to_dict(p) for p in payees.list_for_budget(request.user, budget_id)])


@require_POST
@api_endpoint
def payee_upsert_view(request):
    data = PayeeForm.parse(request.payload)
    return respond(payee_to_dict(payees.upsert(request.user, data)))


# Scheduled transactions


@require_POST
@api_endpoint
def scheduled_transaction_create_view(request):
    data = ScheduledTransactionForm.parse(request.payload)
    schedule = scheduled_transactions.create_schedule(request.user, data)
    return respond(scheduled_transaction_to_dict(schedule), status=201)


@require_GET
@api_endpoint
def scheduled_transactions_for_budget_view(request, budget_id):
    rows = scheduled_transactions.list_for_budget(request.user, budget_id)
    return respond([scheduled_transaction_to_dict(s) for s in rows])


@require_GET
@api_endpoint
def scheduled_transactions_for_account_view(request, account_id):
    rows = scheduled_transactions.list_for_account(request.user, account_id)
    return respond([scheduled_transaction_to_dict(s) for s in rows])


@method_decorator(api_endpoint, name="dispatch")
class ScheduledTransactionDetailView(View):
    def get(self, request, pk):
        return respond(scheduled_transaction_to_dict(scheduled_transactions.get_schedule(request.user, pk)))

    def patch(self, request, pk):
        changes = ScheduledTransactionUpdateForm.parse(request.payload, partial=True)
        schedule = scheduled_transactions.update_schedule(request.user, pk, changes)
        return respond(scheduled_transaction_to_dict(schedule))

    def delete(self, request, pk):
        scheduled_transactions.delete_schedule(request.user, pk)
        return respond({"success": True})


# Net worth


@method_decorator(api_endpoint, name="dispatch")
class NetWorthHistoryView(View):
    def get(self, request, budget_id):
        points = [net_worth_to_dict(s) for s in net_worth.history(request.user, budget_id)]
        return respond({"has_data": bool(points), "data_points": points})

    def delete(self, request, budget_id):
        deleted = net_worth.delete_history(request.user, budget_id)
        return respond({"success": True, "deleted": deleted})


@require_POST
@api_endpoint
def net_worth_snapshot_view(request):
    data = NetWorthSnapshotForm.parse(request.payload)
    snapshot = net_worth.take_snapshot(
        request.user, data["budget_id"], request.month_context, month_date=data["month_date"]
    )
    return respond(net_worth_to_dict(snapshot), status=201)


@require_http_methods(["PATCH"])
@api_endpoint
def net_worth_note_view(request):
    data = NetWorthNoteForm.parse(request.payload)
    snapshot = net_worth.update_note(request.user, data["budget_id"], data["month_date"], data["note"])
    return respond(net_worth_to_dict(snapshot))
