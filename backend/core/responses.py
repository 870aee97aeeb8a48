"""Success envelope shared by every endpoint."""
from rest_framework import status as http_status
from rest_framework.response import Response


def success(data=None, message=None, status=http_status.HTTP_200_OK):
    payload = {'status': 'success', 'data': data}
    if message:
        payload['message'] = message
    return Response(payload, status=status)


def is_enveloped(data):
    return isinstance(data, dict) and data.get('status') in ('success', 'error')


class EnvelopeMixin:
    """
    Wrap the plain serializer output of generic views and viewsets in the
    success envelope. Responses that are already enveloped pass through.
    """

    def finalize_response(self, request, response, *args, **kwargs):
        if (
            isinstance(response, Response)
            and response.status_code < 400
            and response.status_code != http_status.HTTP_204_NO_CONTENT
            and not is_enveloped(response.data)
        ):
            response.data = {'status': 'success', 'data': response.data}
        return super().finalize_response(request, response, *args, **kwargs)
