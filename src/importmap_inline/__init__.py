"""
importmap-inline
Serve external import maps inline in HTML responses
"""
from .body import UnsupportedBodyError, inline_import_maps_in_body, read_body
from .middleware import ImportMapInlineMiddleware, ImportMapInlineOptions
from .paths import index_html_file_path, resolve_document_path, resolve_import_map_path
from .transform import inline_import_maps

__version__ = '0.1.0'

__all__ = [
    'ImportMapInlineMiddleware',
    'ImportMapInlineOptions',
    'UnsupportedBodyError',
    'index_html_file_path',
    'inline_import_maps',
    'inline_import_maps_in_body',
    'read_body',
    'resolve_document_path',
    'resolve_import_map_path',
]
