"""
Root URL configuration.
All marketplace endpoints live under /api without trailing slashes.
"""
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/', include('apps.accounts.urls')),
    path('api/', include('apps.orders.urls')),
    path('api/', include('apps.notifications.urls')),
    path('api/', include('apps.ledger.urls')),

    # API documentation
    path('api/schema', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
