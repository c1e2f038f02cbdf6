"""
Order URL patterns.
"""
from django.urls import path
from apps.orders import views

app_name = 'orders'

urlpatterns = [
    # Order CRUD
    path('orders', views.OrderListCreateView.as_view(), name='list-create'),
    path('orders/<str:identifier>', views.order_detail, name='detail'),
    path('users/<str:external_id>/orders', views.user_orders, name='user-orders'),

    # State transitions
    path('orders/<str:identifier>/join', views.join_order, name='join'),
    path('orders/<str:identifier>/status', views.update_status, name='status'),
]
