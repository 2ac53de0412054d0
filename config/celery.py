import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("availability")

# beat_schedule comes from CELERY_BEAT_SCHEDULE in the Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
