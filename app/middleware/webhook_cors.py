"""Open CORS for the voice-platform endpoints.

The dashboard API only accepts the configured frontend origin; the
``/api/voice-agent/*`` routes are called from the vendor's infrastructure and
its browser widget, so they answer any origin. Preflight requests are
answered here before the app-wide ``CORSMiddleware`` can reject them.
"""


from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

WEBHOOK_CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


class WebhookCORSMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, path_prefix: str = "/api/voice-agent"):
        super().__init__(app)
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        if request.method == "OPTIONS":
            return PlainTextResponse("ok", headers=WEBHOOK_CORS_HEADERS)

        response = await call_next(request)
        for name, value in WEBHOOK_CORS_HEADERS.items():
            response.headers[name] = value
        return response
