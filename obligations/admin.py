from django.contrib import admin

from obligations.models import InitialDebt, MonthlyDue, AssistanceCharge, StandingObligation


class InitialDebtAdmin(admin.ModelAdmin):
    list_display = ("member", "year", "amount_due", "amount_paid", "amount_remaining", "status")
    search_fields = ("member__member_no", "reference")
    list_filter = ("status", "year")
    ordering = ("-year",)


class MonthlyDueAdmin(admin.ModelAdmin):
    list_display = ("member", "due_type", "period", "amount_due", "amount_paid", "amount_remaining", "status")
    search_fields = ("member__member_no", "period", "reference")
    list_filter = ("status", "due_type", "period")
    ordering = ("-due_date",)


class AssistanceChargeAdmin(admin.ModelAdmin):
    list_display = ("member", "assistance_type", "event_date", "amount_due", "amount_remaining", "status")
    search_fields = ("member__member_no", "reference")
    list_filter = ("status", "assistance_type")
    ordering = ("-event_date",)


class StandingObligationAdmin(admin.ModelAdmin):
    list_display = ("member", "label", "due_date", "amount_due", "amount_remaining", "status")
    search_fields = ("member__member_no", "label", "reference")
    list_filter = ("status",)
    ordering = ("-due_date",)


admin.site.register(InitialDebt, InitialDebtAdmin)
admin.site.register(MonthlyDue, MonthlyDueAdmin)
admin.site.register(AssistanceCharge, AssistanceChargeAdmin)
admin.site.register(StandingObligation, StandingObligationAdmin)
