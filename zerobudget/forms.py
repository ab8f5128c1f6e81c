from __future__ import annotations

from decimal import Decimal

from django import forms
from django.core.exceptions import ValidationError

from .models import AccountType, CurrencyPlacement, ScheduleFrequency


def money_field(**kwargs):
    return forms.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class UUIDListField(forms.Field):
    default_error_messages = {
        "invalid_list": "Enter a list of ids.",
    }

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValidationError(self.error_messages["invalid_list"], code="invalid_list")
        item_field = forms.UUIDField()
        return [item_field.clean(item) for item in value]


class PayloadForm(forms.Form):
    """Validates a decoded JSON body.

    ``parse`` raises ``ValidationError`` with per-field messages. With
    ``partial=True`` every field becomes optional and only the keys the
    client actually sent are returned.
    """

    @classmethod
    def parse(cls, data, partial: bool = False) -> dict:
        form = cls(data=data)
        if partial:
            for field in form.fields.values():
                field.required = False
        if not form.is_valid():
            raise ValidationError(form.errors.as_data())
        if partial:
            return {name: value for name, value in form.cleaned_data.items() if name in form.data}
        return form.cleaned_data


class MonthForm(PayloadForm):
    year = forms.IntegerField(required=False, min_value=1900, max_value=9999)
    month = forms.IntegerField(required=False, min_value=1, max_value=12)


class BudgetForm(PayloadForm):
    name = forms.CharField(max_length=200)
    currency = forms.CharField(max_length=3, required=False)
    currency_placement = forms.ChoiceField(choices=CurrencyPlacement.choices, required=False)
    number_format = forms.CharField(max_length=20, required=False)
    date_format = forms.CharField(max_length=20, required=False)
    theme = forms.CharField(max_length=20, required=False)

    def clean_currency(self):
        return (self.cleaned_data.get("currency") or "").upper()


class AccountForm(PayloadForm):
    budget_id = forms.UUIDField()
    name = forms.CharField(max_length=200)
    account_type = forms.ChoiceField(choices=AccountType.choices, required=False)
    starting_balance = money_field(required=False)


class AccountUpdateForm(PayloadForm):
    name = forms.CharField(max_length=200)
    display_order = forms.IntegerField(min_value=0)
    starting_balance = money_field()


class ReconcileForm(PayloadForm):
    actual_balance = money_field()


class TrackingBalanceForm(PayloadForm):
    balance = money_field()
    memo = forms.CharField(required=False)


class CategoryGroupForm(PayloadForm):
    budget_id = forms.UUIDField()
    name = forms.CharField(max_length=200)
    display_order = forms.IntegerField(min_value=0, required=False)


class CategoryGroupUpdateForm(PayloadForm):
    name = forms.CharField(max_length=200)
    display_order = forms.IntegerField(min_value=0)


class CategoryForm(PayloadForm):
    category_group_id = forms.UUIDField()
    name = forms.CharField(max_length=200)
    display_order = forms.IntegerField(min_value=0, required=False)


class CategoryUpdateForm(MonthForm):
    name = forms.CharField(max_length=200)
    display_order = forms.IntegerField(min_value=0)
    assigned = money_field()
    activity = money_field()
    available = money_field()

    def clean_assigned(self):
        assigned = self.cleaned_data.get("assigned")
        if assigned is not None and assigned < 0:
            raise ValidationError("Assigned amount cannot be negative.")
        return assigned


class CategoryBalanceUpdateForm(MonthForm):
    assigned = money_field()
    activity = money_field()
    available = money_field()


class UnhideCategoryForm(PayloadForm):
    targetGroupId = forms.UUIDField(required=False)


class CategoryReorderForm(PayloadForm):
    category_ids = UUIDListField()


class CategoryGroupReorderForm(PayloadForm):
    group_ids = UUIDListField()


class PositiveAmountForm(MonthForm):
    amount = money_field(min_value=Decimal("0.01"))


class MoveMoneyForm(PositiveAmountForm):
    sourceCategoryId = forms.UUIDField()
    destinationCategoryId = forms.UUIDField()

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("sourceCategoryId") and cleaned.get("sourceCategoryId") == cleaned.get("destinationCategoryId"):
            raise ValidationError("Source and destination categories must differ.")
        return cleaned


class MoveToReadyToAssignForm(PositiveAmountForm):
    sourceCategoryId = forms.UUIDField()


class PullFromReadyToAssignForm(PositiveAmountForm):
    destinationCategoryId = forms.UUIDField()


class TransactionForm(PayloadForm):
    account_id = forms.UUIDField()
    date = forms.DateField(input_formats=["%Y-%m-%d"])
    amount = money_field()
    memo = forms.CharField(required=False)
    payee = forms.CharField(max_length=200, required=False)
    category_id = forms.CharField(max_length=36, required=False)
    is_cleared = forms.BooleanField(required=False)
    is_reconciled = forms.BooleanField(required=False)

    def clean_category_id(self):
        value = (self.cleaned_data.get("category_id") or "").strip()
        if value in ("", "ready-to-assign"):
            return None
        return forms.UUIDField().clean(value)


class TransactionUpdateForm(TransactionForm):
    pass


class AutoAssignItemForm(PayloadForm):
    category_id = forms.UUIDField()
    amount = money_field(min_value=Decimal("0.01"))


class AutoAssignItemsField(forms.Field):
    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValidationError("Enter a list of items.")
        items = []
        for position, item in enumerate(value):
            try:
                items.append(AutoAssignItemForm.parse(item if isinstance(item, dict) else {}))
            except ValidationError as e:
                raise ValidationError([f"Item {position}: {message}" for message in e.messages])
        return items


class AutoAssignForm(PayloadForm):
    name = forms.CharField(max_length=200)
    budget_id = forms.UUIDField()
    items = AutoAssignItemsField()


class AutoAssignUpdateForm(PayloadForm):
    name = forms.CharField(max_length=200, required=False)
    items = AutoAssignItemsField(required=False)


class ApplyAutoAssignForm(MonthForm):
    name = forms.CharField(max_length=200)
    budget_id = forms.UUIDField()


class PayeeForm(PayloadForm):
    budget_id = forms.UUIDField()
    name = forms.CharField(max_length=200)
    last_category_id = forms.UUIDField(required=False)
    is_transfer = forms.BooleanField(required=False)


class ScheduledTransactionForm(PayloadForm):
    budget_id = forms.UUIDField()
    account_id = forms.UUIDField()
    category_id = forms.CharField(max_length=36, required=False)
    payee = forms.CharField(max_length=200)
    amount = money_field()
    memo = forms.CharField(required=False)
    frequency = forms.TypedChoiceField(choices=ScheduleFrequency.choices, required=False, empty_value=None)
    specific_date = forms.DateField(input_formats=["%Y-%m-%d"], required=False)
    day_of_month = forms.IntegerField(min_value=1, max_value=31, required=False)
    day_of_week = forms.IntegerField(min_value=0, max_value=6, required=False)
    month_of_year = forms.IntegerField(min_value=1, max_value=12, required=False)
    is_active = forms.NullBooleanField(required=False)

    clean_category_id = TransactionForm.clean_category_id


class ScheduledTransactionUpdateForm(ScheduledTransactionForm):
    budget_id = None


class NetWorthSnapshotForm(PayloadForm):
    budget_id = forms.UUIDField()
    month_date = forms.DateField(input_formats=["%Y-%m-%d"], required=False)


class NetWorthNoteForm(PayloadForm):
    budget_id = forms.UUIDField()
    month_date = forms.DateField(input_formats=["%Y-%m-%d"])
    note = forms.CharField(required=False)
