from django.apps import AppConfig


class ZeroBudgetConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "zerobudget"
    verbose_name = "Zero-based budgeting"
