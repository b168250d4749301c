"""
Import map inlining middleware
Post-processes HTML responses so external import maps are served inline
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .body import inline_import_maps_in_body
from .paths import resolve_document_path

logger = logging.getLogger(__name__)

HTML_MEDIA_TYPE = "text/html"

# no longer valid once the body is rewritten; validators and ranges refer to the
# HTML file alone, not to the import maps inlined into it
_REPLACED_HEADERS = {
    b"content-length",
    b"content-type",
    b"etag",
    b"last-modified",
    b"accept-ranges",
}


@dataclass(frozen=True)
class ImportMapInlineOptions:
    """Middleware options"""
    # absolute file-system path of the served directory, absolute `src` values resolve against it
    served_root: str
    # request url -> file path relative to the served directory, eg "/" -> "/index.html"
    get_file_path_of_request_url: Callable[[str], str]
    # only consulted for HTML responses, None means always run
    should_run: Optional[Callable[[Request], bool]] = None

    def runs_for(self, request: Request) -> bool:
        if self.should_run is None:
            return True
        return bool(self.should_run(request))


def is_html(content_type: Optional[str]) -> bool:
    """Whether a Content-Type header value declares an HTML document"""
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() == HTML_MEDIA_TYPE


def request_url(request: Request) -> str:
    """Path and query string of the request, as sent by the client"""
    url = request.url.path
    if request.url.query:
        url += f"?{request.url.query}"
    return url


def response_body(response: Response):
    """The body of a response in whichever representation it currently has"""
    body_iterator = getattr(response, "body_iterator", None)
    if body_iterator is not None:
        return body_iterator
    return getattr(response, "body", None)


def html_response(original: Response, html: str) -> Response:
    """Replacement response carrying the rewritten document"""
    response = Response(
        content=html,
        status_code=original.status_code,
        media_type=HTML_MEDIA_TYPE,
        background=getattr(original, "background", None),
    )
    response.raw_headers.extend(
        (key, value) for key, value in original.raw_headers if key.lower() not in _REPLACED_HEADERS
    )
    return response


class ImportMapInlineMiddleware(BaseHTTPMiddleware):
    """
    Inline external import maps of HTML responses.

    Usage:
        app.add_middleware(
            ImportMapInlineMiddleware,
            served_root="/srv/site",
            get_file_path_of_request_url=index_html_file_path,
        )

    Add it before any compression middleware so it sees the uncompressed body.
    """

    def __init__(
        self,
        app: ASGIApp,
        served_root: str,
        get_file_path_of_request_url: Callable[[str], str],
        should_run: Optional[Callable[[Request], bool]] = None,
    ):
        super().__init__(app)
        self.options = ImportMapInlineOptions(
            served_root=served_root,
            get_file_path_of_request_url=get_file_path_of_request_url,
            should_run=should_run,
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        if request.method == "HEAD":
            return response

        # a byte range of the file is not a complete document
        if response.status_code == 206:
            return response

        if not is_html(response.headers.get("content-type")):
            return response

        if not self.options.runs_for(request):
            logger.debug(f"Skipped {request.url.path}: disabled by should_run")
            return response

        url = request_url(request)
        document_path = resolve_document_path(
            self.options.served_root,
            self.options.get_file_path_of_request_url(url),
        )

        html = await inline_import_maps_in_body(
            self.options.served_root,
            document_path,
            response_body(response),
        )

        logger.debug(f"Rewrote {url} ({document_path})")
        return html_response(response, html)
