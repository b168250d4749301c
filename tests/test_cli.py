import os

import pytest

from importmap_inline import cli
from importmap_inline.config import get_config, reset_config

COMPACT = '{"imports":{"x":"./x.js"}}'


@pytest.fixture(autouse=True)
def fresh_config():
    names = [f"IMPORTMAP_INLINE_{name}" for name in ("HOST", "PORT", "SERVED_DIR", "LOG_LEVEL")]
    saved = {name: os.environ.pop(name) for name in names if name in os.environ}
    reset_config()
    yield
    for name in names:
        os.environ.pop(name, None)
    os.environ.update(saved)
    reset_config()


def test_inline_prints_rewritten_document(site, capsys):
    code = cli.main(["inline", str(site / "index.html")])
    out = capsys.readouterr().out
    assert code == 0
    assert f'<script type="importmap">{COMPACT}</script>' in out
    assert 'src="/maps/m.json"' not in out


def test_inline_with_explicit_root(site, capsys):
    page = site / "pages" / "c.html"
    page.write_text('<script type="importmap" src="/maps/m.json"></script>', encoding="utf-8")
    assert cli.main(["inline", str(page), "--root", str(site)]) == 0
    assert capsys.readouterr().out == f'<script type="importmap">{COMPACT}</script>'


def test_inline_reports_missing_import_map(site, capsys):
    page = site / "bad.html"
    page.write_text('<script type="importmap" src="/maps/missing.json"></script>', encoding="utf-8")
    assert cli.main(["inline", str(page)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "missing.json" in captured.err


def test_inline_reports_invalid_json(site, capsys):
    page = site / "bad.html"
    page.write_text('<script type="importmap" src="/broken.json"></script>', encoding="utf-8")
    assert cli.main(["inline", str(page)]) == 1
    assert capsys.readouterr().err.startswith("importmap-inline:")


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "serve" in capsys.readouterr().out


def test_serve_uses_config_and_flags(site, monkeypatch):
    calls = {}

    def fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr("uvicorn.run", fake_run)
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    monkeypatch.setenv("IMPORTMAP_INLINE_PORT", "9001")

    assert cli.main(["serve", str(site), "--host", "0.0.0.0"]) == 0
    assert calls["host"] == "0.0.0.0"
    assert calls["port"] == 9001
    assert calls["log_level"] == "info"
    assert calls["app"] is not None


def test_config_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = get_config()
    assert config == {
        "host": "127.0.0.1",
        "port": 8080,
        "served_dir": os.path.abspath("."),
        "log_level": "info",
    }


def test_config_reads_dotenv_and_environment(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text(
        "IMPORTMAP_INLINE_PORT=9000\nIMPORTMAP_INLINE_HOST=10.0.0.1\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("IMPORTMAP_INLINE_HOST", "0.0.0.0")

    config = get_config()
    assert config["port"] == 9000
    assert config["host"] == "0.0.0.0"
    assert get_config() is config
