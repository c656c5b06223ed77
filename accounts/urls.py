from django.urls import path

from accounts.views import TokenView, MemberListView

app_name = "accounts"

urlpatterns = [
    path("token/", TokenView.as_view(), name="token"),
    path("", MemberListView.as_view(), name="members"),
]
