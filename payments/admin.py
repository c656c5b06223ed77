from django.contrib import admin

from payments.models import Payment


class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "identity",
        "member",
        "amount",
        "payment_method",
        "payment_date",
        "recorded_by",
        "created_at",
    )

    search_fields = (
        "identity",
        "reference",
        "member__member_no",
        "payment_reference",
    )

    list_filter = ("payment_method", "payment_date")

    ordering = ["-created_at"]


admin.site.register(Payment, PaymentAdmin)
