from django.urls import path

from .consumers import CertificateMetricsConsumer

websocket_urlpatterns = [
    path("ws/certificates/metrics/", CertificateMetricsConsumer.as_asgi()),
]
