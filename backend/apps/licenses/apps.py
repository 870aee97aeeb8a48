from django.apps import AppConfig


class LicensesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.apps.licenses'
    label = 'licenses'
    verbose_name = 'License inventory'
