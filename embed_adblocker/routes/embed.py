import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from embed_adblocker.configs import settings
from embed_adblocker.extractors.proxy import ProxyRewriter, build_error_document, build_wrapper_document, document_headers
from embed_adblocker.extractors.static import StaticExtractor
from embed_adblocker.schemas import EmbedRequest, ExtractionResult, InvalidRequestError
from embed_adblocker.utils.http_utils import FetchError

embed_router = APIRouter()
logger = logging.getLogger(__name__)


def parse_timeout(timeout: Optional[str]) -> int:
    """Parse the timeout parameter, falling back to the default when missing or unusable."""
    try:
        value = int(timeout) if timeout else settings.default_timeout_ms
    except ValueError:
        logger.warning(f"Ignoring unparsable timeout: {timeout!r}")
        value = settings.default_timeout_ms
    if value <= 0:
        value = settings.default_timeout_ms
    return min(value, settings.max_timeout_ms)


def parse_embed_request(url: Optional[str], timeout: Optional[str], mode: Optional[str]) -> EmbedRequest:
    """
    Validate the raw query parameters.

    Raises:
        InvalidRequestError: If ``url`` is missing or not an absolute http(s) URL.
    """
    if not url:
        raise InvalidRequestError("Missing required parameter: url")

    mode = mode or "extract"
    if mode not in ("extract", "proxy", "wrapper"):
        logger.warning(f"Unknown mode {mode!r}, falling back to extract")
        mode = "extract"
    if mode == "wrapper" and not settings.enable_wrapper_mode:
        raise InvalidRequestError("Wrapper mode is disabled")

    try:
        return EmbedRequest(url=url, timeout=parse_timeout(timeout), mode=mode)
    except ValidationError:
        raise InvalidRequestError("Invalid URL format")


async def extract_sources(embed_request: EmbedRequest) -> JSONResponse:
    extractor = StaticExtractor()
    try:
        sources = await extractor.extract(embed_request.url, embed_request.timeout)
    except FetchError as e:
        logger.error(f"Extraction failed: {e.message}")
        result = ExtractionResult(success=False, error=e.message, debug=extractor.debug_info())
        return JSONResponse(result.to_response(), status_code=500)
    except Exception as e:
        logger.exception(f"Extraction failed: {str(e)}")
        result = ExtractionResult(success=False, error=f"Extraction failed: {str(e)}", debug=extractor.debug_info())
        return JSONResponse(result.to_response(), status_code=500)

    result = ExtractionResult(
        success=bool(sources),
        sources=sources or None,
        error=None if sources else "No video sources detected",
        debug=extractor.debug_info(),
    )
    return JSONResponse(result.to_response(), status_code=200 if sources else 404)


async def proxy_page(embed_request: EmbedRequest) -> HTMLResponse:
    rewriter = ProxyRewriter()
    try:
        document = await rewriter.extract(embed_request.url, embed_request.timeout)
    except FetchError as e:
        logger.error(f"[Proxy] Error: {e.message}")
        return HTMLResponse(build_error_document(e.message), status_code=500, headers=document_headers())
    except Exception as e:
        logger.exception(f"[Proxy] Error: {str(e)}")
        return HTMLResponse(build_error_document("Failed to process embed page"), status_code=500, headers=document_headers())

    logger.info("[Proxy] Injected extractor script, returning modified HTML")
    return HTMLResponse(document.html, headers=document.headers)


@embed_router.get("/")
async def embed_adblocker(
    url: Annotated[Optional[str], Query(description="The embed page to process.")] = None,
    timeout: Annotated[Optional[str], Query(description="Fetch timeout in milliseconds.")] = None,
    mode: Annotated[Optional[str], Query(description="extract, proxy or wrapper.")] = None,
):
    """Extract stream URLs from an embed page, or return an ad-neutralized copy of it."""
    try:
        embed_request = parse_embed_request(url, timeout, mode)
    except InvalidRequestError as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=400)

    logger.info(f"[Request] Mode: {embed_request.mode}, URL: {embed_request.url}")

    if embed_request.mode == "proxy":
        return await proxy_page(embed_request)
    if embed_request.mode == "wrapper":
        document = build_wrapper_document(embed_request.url)
        return HTMLResponse(document.html, headers=document.headers)
    return await extract_sources(embed_request)
