"""
Accounts API URLs
"""

from rest_framework.routers import DefaultRouter

from .viewsets import RoleViewSet, UserViewSet

app_name = 'accounts'

router = DefaultRouter()

router.register(r'users', UserViewSet, basename='user')
router.register(r'roles', RoleViewSet, basename='role')

urlpatterns = router.urls
