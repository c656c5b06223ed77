from django.urls import path

from duetypes.views import DueTypeListCreateView, DueTypeDetailView

app_name = "duetypes"

urlpatterns = [
    path("", DueTypeListCreateView.as_view(), name="list-create"),
    path("<str:reference>/", DueTypeDetailView.as_view(), name="detail"),
]
