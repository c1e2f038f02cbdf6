"""
Ledger URL patterns.
"""
from django.urls import path
from apps.ledger import views

app_name = 'ledger'

urlpatterns = [
    path('stats', views.platform_stats, name='stats'),
]
