from django.contrib import admin

from activitylogs.models import ActivityLog


class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("action", "member", "actor", "amount", "source_model", "created_at")
    search_fields = ("member__member_no", "actor__member_no", "source_id", "reference")
    list_filter = ("action", "source_model")
    ordering = ["-created_at"]


admin.site.register(ActivityLog, ActivityLogAdmin)
