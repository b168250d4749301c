"""
Dev server
Serves a directory of static files with external import maps inlined
"""
import logging
import mimetypes
import os
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.requests import Request

from .middleware import ImportMapInlineMiddleware
from .paths import index_html_file_path

logger = logging.getLogger(__name__)

ES_MODULE_EXTENSIONS = ('.js', '.mjs')
JAVASCRIPT_MEDIA_TYPE = 'application/javascript'

# Some platforms (notably Windows registry entries) map .js to text/plain,
# which browsers refuse for ES modules
mimetypes.init()
for _extension in ES_MODULE_EXTENSIONS:
    mimetypes.add_type(JAVASCRIPT_MEDIA_TYPE, _extension)


class ModuleStaticFiles(StaticFiles):
    """StaticFiles that always serves ES modules as application/javascript"""

    def file_response(self, *args, **kwargs):
        resp = super().file_response(*args, **kwargs)
        if hasattr(resp, 'path') and str(resp.path).lower().endswith(ES_MODULE_EXTENSIONS):
            resp.media_type = JAVASCRIPT_MEDIA_TYPE
            resp.headers['content-type'] = JAVASCRIPT_MEDIA_TYPE
        return resp


def create_app(
    served_dir: str,
    get_file_path_of_request_url: Callable[[str], str] = index_html_file_path,
    should_run: Optional[Callable[[Request], bool]] = None,
) -> FastAPI:
    """
    Build the dev server app.

    Args:
        served_dir: directory to serve
        get_file_path_of_request_url: maps request urls to served file paths
        should_run: optional predicate disabling the rewrite per request
    """
    served_root = os.path.abspath(served_dir)

    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    app.add_middleware(
        ImportMapInlineMiddleware,
        served_root=served_root,
        get_file_path_of_request_url=get_file_path_of_request_url,
        should_run=should_run,
    )
    app.mount('/', ModuleStaticFiles(directory=served_root, html=True), name='static')

    logger.info(f"Serving {served_root}")
    return app
