"""
Django configuration package for the license store backend.
Ensures the Celery app is loaded when Django starts so shared tasks bind to it.
"""
from .celery import app as celery_app

__all__ = ('celery_app',)
