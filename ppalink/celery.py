"""
Celery configuration for the PPALink project.

Tasks are auto-discovered from every installed Django app. Notification and
e-mail work runs on dedicated queues so that a slow SMTP relay cannot starve
real-time fan-out.
"""

import os

from celery import Celery
from kombu import Exchange, Queue

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ppalink.settings')

app = Celery('ppalink')

# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()


# ==================== QUEUE CONFIGURATION ====================

default_exchange = Exchange('default', type='direct')
emails_exchange = Exchange('emails', type='direct')
notifications_exchange = Exchange('notifications', type='direct')

app.conf.task_queues = (
    Queue('default', default_exchange, routing_key='default'),
    Queue('emails', emails_exchange, routing_key='emails'),
    Queue('notifications', notifications_exchange, routing_key='notifications'),
)

app.conf.task_default_queue = 'default'
app.conf.task_default_exchange = 'default'
app.conf.task_default_routing_key = 'default'


# ==================== TASK ROUTING ====================

app.conf.task_routes = {
    'ats.tasks.*': {'queue': 'emails'},
    'notifications.tasks.*': {'queue': 'notifications'},
}
