from django.urls import path

from payments.views import (
    PaymentListView,
    PaymentRecordView,
    GeneralPaymentRecordView,
    PaymentDetailView,
    MemberBalanceView,
    FinancialStatsView,
)

app_name = "payments"

urlpatterns = [
    path("", PaymentListView.as_view(), name="list"),
    path("record/", PaymentRecordView.as_view(), name="record"),
    path("general/", GeneralPaymentRecordView.as_view(), name="general"),
    path("balance/<str:member_no>/", MemberBalanceView.as_view(), name="balance"),
    path("stats/", FinancialStatsView.as_view(), name="stats"),
    path("<str:reference>/", PaymentDetailView.as_view(), name="detail"),
]
