from django.contrib import admin

from .models import (
    Account,
    ApiToken,
    AutoAssignItem,
    Budget,
    Category,
    CategoryBalance,
    CategoryGroup,
    CreditCardDebt,
    NetWorthSnapshot,
    Payee,
    ScheduledTransaction,
    Transaction,
)


class AccountInline(admin.TabularInline):
    model = Account
    extra = 0
    fields = ("name", "account_type", "working_balance", "is_active")
    readonly_fields = ("working_balance",)


class CategoryInline(admin.TabularInline):
    model = Category
    extra = 0
    fields = ("name", "display_order", "is_credit_card_payment")


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "currency", "created_at")
    list_filter = ("user",)
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [AccountInline]


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("name", "budget", "account_type", "cleared_balance", "uncleared_balance", "working_balance", "is_active")
    list_filter = ("account_type", "is_active", "budget")
    search_fields = ("name",)
    readonly_fields = ("cleared_balance", "uncleared_balance", "working_balance")


@admin.register(CategoryGroup)
class CategoryGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "budget", "display_order", "is_system_group")
    list_filter = ("is_system_group", "budget")
    inlines = [CategoryInline]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "category_group", "budget", "is_credit_card_payment")
    list_filter = ("is_credit_card_payment", "budget")
    search_fields = ("name",)


@admin.register(CategoryBalance)
class CategoryBalanceAdmin(admin.ModelAdmin):
    list_display = ("category", "year", "month", "assigned", "activity", "available")
    list_filter = ("year", "month", "budget")


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("date", "payee", "amount", "account", "category", "is_cleared", "is_reconciled")
    list_filter = ("is_cleared", "is_reconciled", "account")
    search_fields = ("payee", "memo")
    date_hierarchy = "date"


@admin.register(CreditCardDebt)
class CreditCardDebtAdmin(admin.ModelAdmin):
    list_display = ("transaction", "credit_card_account", "original_category", "debt_amount", "covered_amount", "created_at")
    list_filter = ("credit_card_account",)


@admin.register(AutoAssignItem)
class AutoAssignItemAdmin(admin.ModelAdmin):
    list_display = ("name", "budget", "category", "amount")
    list_filter = ("budget",)
    search_fields = ("name",)


@admin.register(ApiToken)
class ApiTokenAdmin(admin.ModelAdmin):
    list_display = ("user", "name", "created_at")
    readonly_fields = ("key", "created_at")


@admin.register(Payee)
class PayeeAdmin(admin.ModelAdmin):
    list_display = ("name", "budget", "last_category", "last_used_at", "is_transfer")
    list_filter = ("is_transfer", "budget")
    search_fields = ("name",)


@admin.register(ScheduledTransaction)
class ScheduledTransactionAdmin(admin.ModelAdmin):
    list_display = ("payee", "amount", "account", "frequency", "is_active", "last_created_date")
    list_filter = ("frequency", "is_active", "budget")
    search_fields = ("payee", "memo")


@admin.register(NetWorthSnapshot)
class NetWorthSnapshotAdmin(admin.ModelAdmin):
    list_display = ("budget", "month_date", "total_assets", "total_liabilities", "net_worth")
    list_filter = ("budget",)
    date_hierarchy = "month_date"
