import django_filters

from .models import LicenseKey


class LicenseKeyFilter(django_filters.FilterSet):
    product = django_filters.UUIDFilter(field_name="product_id")

    class Meta:
        model = LicenseKey
        fields = ['product', 'plan', 'status']
