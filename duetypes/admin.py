from django.contrib import admin

from duetypes.models import DueType


class DueTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "standard_amount", "is_active", "created_at")
    search_fields = ("name",)
    list_filter = ("is_active",)
    ordering = ("-created_at",)


admin.site.register(DueType, DueTypeAdmin)
