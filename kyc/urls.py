from django.urls import path
from . import views

app_name = "kyc"

urlpatterns = [
    path("submit/", views.submit_verification_view, name="submit"),
    path("status/", views.verification_status_view, name="status"),

    # Admin views
    path("admin/", views.admin_verification_list_view, name="admin_list"),
    path("admin/<int:pk>/", views.admin_verification_detail_view, name="admin_detail"),
    path("admin/<int:pk>/approve/", views.approve_verification_view, name="approve"),
    path("admin/<int:pk>/reject/", views.reject_verification_view, name="reject"),
]
