from django.urls import path

from obligations.views import (
    InitialDebtListCreateView,
    MonthlyDueListView,
    MonthlyDueGenerateView,
    AssistanceChargeListCreateView,
    StandingObligationListCreateView,
)

app_name = "obligations"

urlpatterns = [
    path("initial-debts/", InitialDebtListCreateView.as_view(), name="initial-debts"),
    path("monthly-dues/", MonthlyDueListView.as_view(), name="monthly-dues"),
    path("monthly-dues/generate/", MonthlyDueGenerateView.as_view(), name="monthly-dues-generate"),
    path("assistance-charges/", AssistanceChargeListCreateView.as_view(), name="assistance-charges"),
    path("standing-obligations/", StandingObligationListCreateView.as_view(), name="standing-obligations"),
]
