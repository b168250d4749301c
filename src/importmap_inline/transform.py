"""
Import map inlining
Rewrites <script type="importmap" src="..."> elements into inline import maps
"""
import json
import logging
import re
from html import unescape
from typing import Any, Dict, List, Tuple

import anyio
from bs4 import BeautifulSoup

from .paths import resolve_import_map_path

logger = logging.getLogger(__name__)

IMPORTMAP_TYPE = "importmap"

# browsers read the content of these elements as text, not markup
TEXT_CONTENT_ELEMENTS = ["textarea", "title", "xmp", "noembed", "noframes", "iframe", "style", "plaintext"]

# quoted attribute values may contain '>'
_START_TAG_RE = re.compile(r"""<script\b(?:"[^"]*"|'[^']*'|[^"'>])*>""", re.IGNORECASE)
_END_TAG_RE = re.compile(r"</script(?:[\s/][^>]*)?>", re.IGNORECASE)
_ATTRIBUTE_RE = re.compile(
    r"""[\s/]*([^\s"'>/=]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]*)))?"""
)


def _line_starts(html: str) -> List[int]:
    """Offset of the first character of every line (html.parser counts lines on \\n only)"""
    starts = [0]
    for line in html.split("\n")[:-1]:
        starts.append(starts[-1] + len(line) + 1)
    return starts


def _scan_attributes(start_tag: str) -> Tuple[List[Tuple[re.Match, str, str]], int]:
    """
    Attributes of a <script ...> start tag in source order.

    Returns:
        ([(match, lowercased name, unescaped value), ...], offset just past the last attribute)
    """
    position = len("<script")
    attributes = []
    while True:
        attribute = _ATTRIBUTE_RE.match(start_tag, position)
        if attribute is None:
            break
        raw = next((group for group in attribute.group(2, 3, 4) if group is not None), "")
        attributes.append((attribute, attribute.group(1).lower(), unescape(raw)))
        position = attribute.end()
    return attributes, position


def start_tag_attributes(start_tag: str) -> Dict[str, str]:
    """Attribute values of a start tag; the first of duplicated attributes wins, as in browsers"""
    values = {}
    for _, name, value in _scan_attributes(start_tag)[0]:
        values.setdefault(name, value)
    return values


def _remove_src(start_tag: str) -> str:
    """Drop the src attribute from a <script ...> start tag, keeping the other attributes verbatim"""
    attributes, end = _scan_attributes(start_tag)
    kept = [start_tag[:len("<script")]]
    kept.extend(attribute.group(0) for attribute, name, _ in attributes if name != "src")
    kept.append(start_tag[end:])
    return "".join(kept)


def serialize_import_map(import_map: Any) -> str:
    """Compact JSON text, safe to place inside a <script> element"""
    text = json.dumps(import_map, separators=(",", ":"), ensure_ascii=False)
    return text.replace("</", "<\\/")


async def load_import_map(path: str) -> Any:
    """Read and parse an import map file. Read and parse errors are not caught."""
    data = await anyio.Path(path).read_bytes()
    return json.loads(data)


def find_script_elements(soup: BeautifulSoup) -> list:
    """<script> elements that are real markup, in document order"""
    return [
        tag for tag in soup.find_all("script")
        if tag.find_parent(TEXT_CONTENT_ELEMENTS) is None
    ]


async def inline_import_maps(served_root: str, document_path: str, html: str) -> str:
    """
    Inline every external import map of an HTML document.

    Args:
        served_root: absolute path of the served directory
        document_path: absolute path of the HTML document, relative `src` values resolve against its directory
        html: the complete HTML document

    Returns:
        The document with each matching element's `src` removed and its content
        replaced by the referenced JSON. All other text is copied unchanged.
    """
    soup = BeautifulSoup(html, "html.parser")
    scripts = find_script_elements(soup)
    if not scripts:
        return html

    line_starts = _line_starts(html)
    parts = []
    cursor = 0
    for tag in scripts:
        start = line_starts[tag.sourceline - 1] + tag.sourcepos
        if start < cursor:
            # inside an element that was already rewritten
            continue

        start_tag = _START_TAG_RE.match(html, start)
        if start_tag is None:
            raise ValueError(
                f"Could not locate <script> start tag at line {tag.sourceline}, column {tag.sourcepos}"
            )

        attributes = start_tag_attributes(start_tag.group(0))
        if attributes.get("type") != IMPORTMAP_TYPE or "src" not in attributes:
            continue

        path = resolve_import_map_path(served_root, document_path, attributes["src"])
        import_map = await load_import_map(path)

        parts.append(html[cursor:start])
        parts.append(_remove_src(start_tag.group(0)))
        parts.append(serialize_import_map(import_map))

        end_tag = _END_TAG_RE.search(html, start_tag.end())
        if end_tag is None:
            # unclosed element runs to the end of the document
            parts.append("</script>")
            cursor = len(html)
        else:
            parts.append(end_tag.group(0))
            cursor = end_tag.end()

        logger.debug(f"Inlined import map {path} into {document_path}")

    if not parts:
        return html

    parts.append(html[cursor:])
    return "".join(parts)
