from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v1/auth/", include("accounts.urls")),
    path("api/v1/duetypes/", include("duetypes.urls")),
    path("api/v1/obligations/", include("obligations.urls")),
    path("api/v1/payments/", include("payments.urls")),
    path("api/v1/credits/", include("credits.urls")),
]
