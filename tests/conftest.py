import json

import pytest

IMPORT_MAP = {"imports": {"x": "./x.js"}}
LOCAL_IMPORT_MAP = {"imports": {"y": "/y.js"}}

INDEX_HTML = """<!DOCTYPE html>
<html>
  <head>
    <meta charset='utf-8'>
    <script type="importmap" src="/maps/m.json"></script>
    <script type="module" src="/app.js"></script>
  </head>
  <body><p>index</p></body>
</html>
"""

PAGE_HTML = """<!DOCTYPE html>
<html>
  <head>
    <script type="importmap" src="../maps/m.json"></script>
  </head>
  <body><p>page</p></body>
</html>
"""


@pytest.fixture
def site(tmp_path):
    """Served directory with an index page, a nested page and two import maps"""
    root = tmp_path / "site"
    (root / "maps").mkdir(parents=True)
    (root / "pages").mkdir()
    (root / "maps" / "m.json").write_text(json.dumps(IMPORT_MAP, indent=2), encoding="utf-8")
    (root / "pages" / "local.json").write_text(json.dumps(LOCAL_IMPORT_MAP), encoding="utf-8")
    (root / "broken.json").write_text("{not json", encoding="utf-8")
    (root / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (root / "pages" / "a.html").write_text(PAGE_HTML, encoding="utf-8")
    (root / "app.js").write_text("import x from 'x';\n", encoding="utf-8")
    return root


@pytest.fixture
def import_map():
    """Parsed content of maps/m.json in the site fixture"""
    return IMPORT_MAP
