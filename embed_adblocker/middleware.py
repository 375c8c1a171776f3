from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from embed_adblocker.configs import settings
from embed_adblocker.const import CORS_HEADERS


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Answers pre-flight requests and adds the permissive CORS headers to every response.

    Clients depend on these exact header values and on the plain ``ok`` pre-flight
    body, which starlette's ``CORSMiddleware`` does not produce.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return PlainTextResponse("ok", headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


class DocsAccessControlMiddleware(BaseHTTPMiddleware):
    """Middleware that hides the API documentation based on settings."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if settings.disable_docs and (path == "/docs" or path == "/redoc" or path.startswith("/openapi")):
            return JSONResponse({"detail": "Not Found"}, status_code=404)

        return await call_next(request)
