from django.apps import AppConfig


class ActivitylogsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "activitylogs"
