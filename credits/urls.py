from django.urls import path

from credits.views import CreditListView, CreditDetailView

app_name = "credits"

urlpatterns = [
    path("", CreditListView.as_view(), name="list"),
    path("<str:reference>/", CreditDetailView.as_view(), name="detail"),
]
