from django.apps import AppConfig


class FinesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.fines"
    label = "fines"
    verbose_name = "Fines"
