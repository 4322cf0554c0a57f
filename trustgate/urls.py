from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/verification/", include("kyc.urls")),
    path("api/users/", include("users.urls")),
]
