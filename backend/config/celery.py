import os

from celery import Celery
from kombu import Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.config.settings')

app = Celery('license_store')

# Configure Celery using Django settings
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks.py modules from all registered Django apps
app.autodiscover_tasks()

app.conf.task_queues = (
    Queue('default'),
    Queue('emails'),
)
app.conf.task_default_queue = 'default'
app.conf.task_default_exchange = 'default'
app.conf.task_default_routing_key = 'default'

app.conf.task_routes = {
    'backend.apps.notifications.tasks.*': {'queue': 'emails'},
}

# Enforce JSON serialization
app.conf.task_serializer = 'json'
app.conf.result_serializer = 'json'
app.conf.accept_content = ['json']

app.conf.task_time_limit = 120
app.conf.task_soft_time_limit = 90
app.conf.result_expires = 3600
app.conf.task_acks_late = True
app.conf.task_reject_on_worker_lost = True

app.conf.broker_transport_options = {
    'visibility_timeout': 3600,
    'socket_connect_timeout': 5,
    'retry_on_timeout': True,
}
