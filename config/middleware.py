from django.conf import settings
from django.http import HttpResponse


def _allowed_origins():
    raw = getattr(settings, "CORS_ALLOWED_ORIGINS", None) or ["*"]
    return [origin.strip().rstrip("/") for origin in raw if origin and origin.strip()]


class SimpleCorsMiddleware:
    """
    CORS for the browser admin front end.

    Origins listed in settings.CORS_ALLOWED_ORIGINS are echoed back and may
    send credentials. A "*" entry lets any other origin read responses
    anonymously: the header is a literal "*" and credentials are never allowed.
    Unlisted origins get no CORS headers.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.method == "OPTIONS":
            response = HttpResponse()
        else:
            response = self.get_response(request)

        origin = request.headers.get("Origin", "")
        allowed = _allowed_origins()
        if origin and origin.rstrip("/") in allowed:
            response["Access-Control-Allow-Origin"] = origin
            response["Access-Control-Allow-Credentials"] = "true"
            response["Vary"] = "Origin"
        elif "*" in allowed:
            response["Access-Control-Allow-Origin"] = "*"
        else:
            return response

        response["Access-Control-Allow-Methods"] = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
        response["Access-Control-Allow-Headers"] = request.headers.get(
            "Access-Control-Request-Headers", "Content-Type, Authorization"
        )
        return response
