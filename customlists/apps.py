from django.apps import AppConfig


class CustomlistsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "customlists"
