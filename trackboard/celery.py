"""
Celery configuration for Trackboard.

This module configures Celery for async task processing with:
- Auto-discovery of tasks from all registered Django apps
- Task routing to a dedicated mail queue
- Rate limiting for outgoing mail
"""

import os

from celery import Celery
from kombu import Exchange, Queue

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'trackboard.settings')

app = Celery('trackboard')

# All celery-related configuration keys use the `CELERY_` prefix in settings.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()


# ==================== QUEUE CONFIGURATION ====================

default_exchange = Exchange('default', type='direct')
emails_exchange = Exchange('emails', type='direct')

app.conf.task_queues = (
    Queue('default', default_exchange, routing_key='default'),
    Queue('emails', emails_exchange, routing_key='emails'),
)

app.conf.task_default_queue = 'default'
app.conf.task_default_exchange = 'default'
app.conf.task_default_routing_key = 'default'


# ==================== TASK ROUTING ====================

app.conf.task_routes = {
    'notifications.tasks.send_*': {'queue': 'emails', 'routing_key': 'emails'},
}


# ==================== RATE LIMITING ====================

app.conf.task_annotations = {
    'notifications.tasks.send_project_assignment_email': {'rate_limit': '100/m'},
}

