"""
URL configuration for the license store backend.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.http import HttpResponse
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView


def root_view(request):
    """Root view: link to the API schema."""
    return HttpResponse(
        '<html><head><title>License Store</title></head>'
        '<body><h1>API Documentation</h1>'
        '<p><a href="/api/schema/swagger-ui/">Swagger UI</a> | '
        '<a href="/api/schema/redoc/">ReDoc</a></p></body></html>',
        content_type='text/html'
    )


urlpatterns = [
    path("", root_view, name="root"),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/schema/swagger-ui/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/schema/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),

    path("api/", include("backend.apps.accounts.urls")),
    path("api/products/", include("backend.apps.products.urls")),
    path("api/licenses/", include("backend.apps.licenses.urls")),
    path("api/orders/", include("backend.apps.orders.urls")),
    path("api/", include("backend.apps.payments.urls")),
    path("api/resets/", include("backend.apps.support.urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
