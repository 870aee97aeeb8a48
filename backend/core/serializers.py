"""Serializer helpers shared across apps."""
import re

from django.utils.datastructures import MultiValueDict

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])|(?<=[a-z])(?=[0-9])')


def camel_to_snake(name):
    return _CAMEL_BOUNDARY.sub('_', name).lower()


class CamelCaseInputMixin:
    """
    Accept ``productId`` as well as ``product_id`` in request bodies.
    Snake case keys win when a client sends both.
    """

    def to_internal_value(self, data):
        return super().to_internal_value(self._snake_keys(data))

    @staticmethod
    def _snake_keys(data):
        if hasattr(data, 'lists'):
            converted = MultiValueDict()
            for key, values in data.lists():
                snake = camel_to_snake(key)
                if snake != key and snake in data:
                    continue
                converted.setlist(snake, values)
            return converted
        if isinstance(data, dict):
            converted = {}
            for key, value in data.items():
                snake = camel_to_snake(key)
                if snake != key and snake in data:
                    continue
                converted[snake] = value
            return converted
        return data
