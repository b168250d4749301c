"""
Path resolution helpers
Map request URLs and import map `src` values onto the served directory
"""
import os
from urllib.parse import unquote, urlsplit


def _join_below(root: str, path: str) -> str:
    """Join a served-relative path below root; `..` segments are not clamped to root"""
    return os.path.normpath(os.path.join(root, path.lstrip("/")))


def resolve_document_path(served_root: str, file_path: str) -> str:
    """
    Absolute file-system path of the HTML document being served.

    Args:
        served_root: absolute path of the served directory
        file_path: path of the document relative to the served directory, eg "/index.html"
    """
    return _join_below(served_root, file_path)


def resolve_import_map_path(served_root: str, document_path: str, src: str) -> str:
    """
    Absolute file-system path of an external import map.

    An absolute `src` ("/maps/app.json") is relative to the served directory,
    anything else is relative to the directory of the requesting document.
    The path is not checked for existence.
    """
    if src.startswith("/"):
        return _join_below(served_root, src)
    return os.path.normpath(os.path.join(os.path.dirname(document_path), src))


def index_html_file_path(request_url: str) -> str:
    """Default request URL -> file path mapping ("/" -> "/index.html")"""
    path = unquote(urlsplit(request_url).path) or "/"
    if path.endswith("/"):
        path += "index.html"
    return path
