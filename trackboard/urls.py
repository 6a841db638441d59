"""
URL configuration for the trackboard project.

Routes:
- /admin/                      Django admin (projects, tickets, users, roles)
- /api/v1/accounts/            users and roles
- /api/v1/projects/            projects, tickets, comments, status reports
- /api/schema/, /api/docs/     OpenAPI schema and Swagger UI
- /external/<token>/           read-only client dashboard
- /health/                     health check
"""

from django.conf import settings
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView


# ==================== Health Check Endpoint ====================

def health_check(request):
    """
    Health check endpoint for load balancers and monitoring.
    Reports database and cache connectivity.
    """
    from django.core.cache import cache
    from django.db import connection
    import time

    health_status = {
        'status': 'healthy',
        'timestamp': time.time(),
        'version': getattr(settings, 'APP_VERSION', '1.0.0'),
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        health_status['database'] = 'connected'
    except Exception as e:
        health_status['database'] = 'error'
        health_status['status'] = 'degraded'
        health_status['database_error'] = str(e)

    try:
        cache.set('health_check', 'ok', 1)
        if cache.get('health_check') == 'ok':
            health_status['cache'] = 'connected'
        else:
            health_status['cache'] = 'error'
            health_status['status'] = 'degraded'
    except Exception:
        health_status['cache'] = 'unavailable'

    status_code = 200 if health_status['status'] == 'healthy' else 503
    return JsonResponse(health_status, status=status_code)


api_v1_patterns = [
    path('accounts/', include('accounts.api.urls', namespace='accounts')),
    path('projects/', include('projects.api.urls', namespace='projects')),
]

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include((api_v1_patterns, 'v1'), namespace='v1')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('external/', include('projects.urls_external', namespace='external')),
    path('health/', health_check, name='health'),
]
