from django.contrib import admin

from credits.models import Credit, CreditUsage


class CreditAdmin(admin.ModelAdmin):
    list_display = ("reference", "member", "amount", "amount_used", "amount_remaining", "status", "created_at")
    search_fields = ("reference", "member__member_no")
    list_filter = ("status",)
    ordering = ["-created_at"]


class CreditUsageAdmin(admin.ModelAdmin):
    list_display = ("credit", "amount_consumed", "created_at")
    search_fields = ("credit__reference", "reference")
    ordering = ["-created_at"]


admin.site.register(Credit, CreditAdmin)
admin.site.register(CreditUsage, CreditUsageAdmin)
