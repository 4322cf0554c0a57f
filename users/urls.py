from django.urls import path
from . import views

app_name = "users"

urlpatterns = [
    path("me/", views.profile_view, name="profile"),
    path("me/premium/", views.premium_zone_view, name="premium_zone"),
]
