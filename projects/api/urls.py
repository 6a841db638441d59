"""
Projects API URLs
"""

from django.urls import path
from rest_framework.routers import DefaultRouter

from .viewsets import (
    ProjectStatusView,
    ProjectViewSet,
    TicketCommentViewSet,
    TicketPriorityViewSet,
    TicketStatusViewSet,
    TicketViewSet,
)

app_name = 'projects'

router = DefaultRouter()

router.register(r'projects', ProjectViewSet, basename='project')
router.register(r'statuses', TicketStatusViewSet, basename='status')
router.register(r'priorities', TicketPriorityViewSet, basename='priority')
router.register(r'tickets', TicketViewSet, basename='ticket')
router.register(r'comments', TicketCommentViewSet, basename='comment')

urlpatterns = [
    path('status/', ProjectStatusView.as_view(), name='project-status'),
] + router.urls
