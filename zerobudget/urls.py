from django.urls import path

from . import views


app_name = "zerobudget"

urlpatterns = [
    path("budgets", views.BudgetCollectionView.as_view(), name="budget_list"),
    path("budgets/<uuid:pk>", views.BudgetDetailView.as_view(), name="budget_detail"),
    path("ready-to-assign/<uuid:budget_id>", views.ready_to_assign_view, name="ready_to_assign"),

    path("accounts", views.AccountCollectionView.as_view(), name="account_list"),
    path("accounts/<uuid:pk>", views.AccountDetailView.as_view(), name="account_detail"),
    path("accounts/<uuid:pk>/close", views.account_close_view, name="account_close"),
    path("accounts/<uuid:pk>/reopen", views.account_reopen_view, name="account_reopen"),
    path("accounts/<uuid:pk>/reconcile", views.account_reconcile_view, name="account_reconcile"),
    path("accounts/<uuid:pk>/balance", views.account_tracking_balance_view, name="account_tracking_balance"),

    path("category-groups", views.CategoryGroupCollectionView.as_view(), name="category_group_list"),
    path("category-groups/reorder", views.category_group_reorder_view, name="category_group_reorder"),
    path("category-groups/<uuid:pk>", views.CategoryGroupDetailView.as_view(), name="category_group_detail"),
    path("category-groups/<uuid:pk>/hide", views.category_group_hide_view, name="category_group_hide"),

    path("categories", views.CategoryCollectionView.as_view(), name="category_list"),
    path("categories/budget/<uuid:budget_id>", views.categories_for_budget_view, name="categories_for_budget"),
    path("categories/reorder", views.category_reorder_view, name="category_reorder"),
    path("categories/move-money", views.move_money_view, name="move_money"),
    path("categories/move-to-rta", views.move_to_ready_to_assign_view, name="move_to_rta"),
    path("categories/pull-from-rta", views.pull_from_ready_to_assign_view, name="pull_from_rta"),
    path("categories/<uuid:pk>", views.CategoryDetailView.as_view(), name="category_detail"),
    path("categories/<uuid:pk>/hide", views.category_hide_view, name="category_hide"),
    path("categories/<uuid:pk>/unhide", views.category_unhide_view, name="category_unhide"),

    path("category-balances/category/<uuid:category_id>", views.CategoryBalanceView.as_view(), name="category_balance"),
    path("category-balances/budget/<uuid:budget_id>", views.category_balances_for_budget_view, name="category_balances_for_budget"),
    path("category-balances/ensure/<uuid:budget_id>", views.ensure_category_balances_view, name="category_balances_ensure"),

    path("transactions", views.transaction_create_view, name="transaction_create"),
    path("transactions/account/<uuid:account_id>", views.transactions_for_account_view, name="transactions_for_account"),
    path("transactions/budget/<uuid:budget_id>", views.transactions_for_budget_view, name="transactions_for_budget"),
    path("transactions/<uuid:pk>", views.TransactionDetailView.as_view(), name="transaction_detail"),
    path("transactions/<uuid:pk>/toggle-cleared", views.transaction_toggle_cleared_view, name="transaction_toggle_cleared"),

    path("credit-card-debt/category/<uuid:category_id>", views.debt_summary_view, name="debt_summary"),

    path("auto-assign", views.auto_assign_create_view, name="auto_assign_create"),
    path("auto-assign/apply", views.auto_assign_apply_view, name="auto_assign_apply"),
    path("auto-assign/budget/<uuid:budget_id>", views.auto_assign_list_view, name="auto_assign_list"),
    path("auto-assign/budget/<uuid:budget_id>/config/<str:name>", views.AutoAssignConfigView.as_view(), name="auto_assign_config"),

    path("payees", views.payee_upsert_view, name="payee_upsert"),
    path("payees/budget/<uuid:budget_id>", views.PayeeCollectionView.as_view(), name="payee_list"),

    path("scheduled-transactions", views.scheduled_transaction_create_view, name="scheduled_transaction_create"),
    path("scheduled-transactions/budget/<uuid:budget_id>", views.scheduled_transactions_for_budget_view, name="scheduled_transactions_for_budget"),
    path("scheduled-transactions/account/<uuid:account_id>", views.scheduled_transactions_for_account_view, name="scheduled_transactions_for_account"),
    path("scheduled-transactions/<uuid:pk>", views.ScheduledTransactionDetailView.as_view(), name="scheduled_transaction_detail"),

    path("net-worth-history/budget/<uuid:budget_id>", views.NetWorthHistoryView.as_view(), name="net_worth_history"),
    path("net-worth-history/snapshot", views.net_worth_snapshot_view, name="net_worth_snapshot"),
    path("net-worth-history/note", views.net_worth_note_view, name="net_worth_note"),
]
