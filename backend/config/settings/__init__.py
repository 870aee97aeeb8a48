"""
Settings package for the license store backend.
Uses modular approach with base/dev/prod/testing settings.
"""
import os

from .base import *

# Determine which settings to use based on environment
DJANGO_ENV = os.environ.get('DJANGO_ENV', 'development')

if DJANGO_ENV == 'production':
    from .production import *
elif DJANGO_ENV == 'testing':
    from .testing import *
else:
    from .development import *
