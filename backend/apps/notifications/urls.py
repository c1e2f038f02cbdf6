"""
Notification URL patterns.
"""
from django.urls import path
from apps.notifications import views

app_name = 'notifications'

urlpatterns = [
    path('users/<str:external_id>/notifications', views.user_notifications, name='list'),
    path('users/<str:external_id>/notifications/unread', views.unread_count, name='unread'),
    path('notifications/<int:notification_id>/read', views.mark_read, name='mark-read'),
]
