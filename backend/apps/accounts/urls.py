from django.urls import path
from apps.accounts import views

app_name = "accounts"

urlpatterns = [
    path("users", views.resolve_user, name="resolve"),
    path("users/<str:external_id>", views.user_profile, name="profile"),
    path("users/<str:external_id>/requisites", views.update_requisites, name="requisites"),
]
