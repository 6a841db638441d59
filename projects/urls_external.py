"""
External Dashboard URLs
"""

from django.urls import path

from . import external_views

app_name = 'external'

urlpatterns = [
    # Session
    path('<str:token>/login/', external_views.ExternalLoginView.as_view(), name='login'),
    path('<str:token>/logout/', external_views.ExternalLogoutView.as_view(), name='logout'),

    # Dashboard data
    path('<str:token>/', external_views.ExternalDashboardView.as_view(), name='dashboard'),
    path('<str:token>/tickets/', external_views.ExternalTicketListView.as_view(), name='tickets'),
    path('<str:token>/activities/', external_views.ExternalActivityView.as_view(), name='activities'),
    path('<str:token>/status-report/', external_views.ExternalStatusReportView.as_view(), name='status_report'),

    # Gantt
    path('<str:token>/gantt/', external_views.ExternalGanttView.as_view(), name='gantt'),
    path('<str:token>/gantt/refresh/', external_views.ExternalGanttRefreshView.as_view(), name='gantt_refresh'),
    path('<str:token>/gantt/export/', external_views.ExternalGanttExportView.as_view(), name='gantt_export'),
]
