# FILE: /backend/apps/products/filters.py
"""
Django FilterSet for the Product catalogue.
"""
import django_filters

from .models import Product


class ProductFilter(django_filters.FilterSet):
    """
    Price filters apply to the USD lifetime price, the headline price shown
    on the storefront.
    """
    name = django_filters.CharFilter(lookup_expr='icontains')
    min_price = django_filters.NumberFilter(
        field_name="price_lifetime",
        lookup_expr='gte'
    )
    max_price = django_filters.NumberFilter(
        field_name="price_lifetime",
        lookup_expr='lte'
    )

    class Meta:
        model = Product
        fields = ['name', 'is_active', 'trial_enabled', 'min_price', 'max_price']
