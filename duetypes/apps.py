from django.apps import AppConfig


class DuetypesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "duetypes"
