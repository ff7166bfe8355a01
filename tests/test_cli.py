from __future__ import annotations

import json
import random
import string

import pytest

from pinment.config import CONFIG_ENV_VAR
from pinment.main import main
from pinment.state import create_state, read_json, to_share_url, write_json

PAGE = """<!doctype html>
<html><body>
  <main id="main"><h1 class="title">Heading</h1><p>Body</p></main>
</body></html>
"""

GEOMETRY = """
boxes:
  "#main": [0, 0, 1000, 800]
  "#main>h1": [100, 50, 400, 40]
  "#main>p": [100, 120, 600, 100]
scroll: [0, 0]
"""


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def site(tmp_path):
    html = tmp_path / "page.html"
    html.write_text(PAGE, encoding="utf-8")
    geometry = tmp_path / "geometry.yml"
    geometry.write_text(GEOMETRY, encoding="utf-8")
    return html, geometry


@pytest.fixture
def state_file(tmp_path):
    state = create_state(
        "https://example.com/",
        1000,
        pins=[
            {"id": 1, "s": "#main>h1.title", "ox": 0.5, "oy": 0.5, "fx": 300, "fy": 70, "text": "a"},
            {"id": 2, "s": "#gone", "ox": 0.5, "oy": 0.5, "fx": 5, "fy": 6, "text": "b"},
        ],
    )
    return write_json(tmp_path / "state.json", state)


def _run(argv) -> int:
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def test_anchor_prints_pin_fields(site, capsys) -> None:
    html, geometry = site
    assert _run(["anchor", str(html), str(geometry), "300", "70"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"s": "#main>h1.title", "ox": 0.5, "oy": 0.5, "fx": 300, "fy": 70}


def test_anchor_off_page_is_pixel_only(site, capsys) -> None:
    html, geometry = site
    assert _run(["anchor", str(html), str(geometry), "1500.5", "10"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"s": None, "ox": None, "oy": None, "fx": 1501, "fy": 10}


def test_resolve_reports_fallbacks(site, state_file, capsys) -> None:
    html, geometry = site
    assert _run(["resolve", str(html), str(geometry), str(state_file)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == [
        {"id": 1, "left": 300.0, "top": 70.0, "fallback": False},
        {"id": 2, "left": 5, "top": 6, "fallback": True},
    ]


def test_share_then_open(state_file, tmp_path, capsys) -> None:
    assert _run(["share", str(state_file)]) == 0
    url = capsys.readouterr().out.strip()
    assert url.startswith("https://khawkins98.github.io/pinment/#data=")

    target = tmp_path / "opened.json"
    assert _run(["open", url, "--output", str(target)]) == 0
    assert read_json(target).to_wire() == read_json(state_file).to_wire()

    assert _run(["open", url]) == 0
    assert json.loads(capsys.readouterr().out) == read_json(state_file).to_wire()


def test_share_refuses_over_budget(tmp_path, capsys) -> None:
    rng = random.Random(1)
    pins = [
        {"id": i, "fx": i, "fy": i, "text": "".join(rng.choice(string.ascii_letters) for _ in range(60))}
        for i in range(1, 40)
    ]
    path = write_json(tmp_path / "big.json", create_state("https://example.com/", 1000, pins=pins))
    config = tmp_path / "pinment.yml"
    config.write_text("share:\n  max_url_bytes: 256\n", encoding="utf-8")

    assert _run(["--config", str(config), "share", str(path)]) == 2
    assert capsys.readouterr().out == ""
    assert _run(["--config", str(config), "share", str(path), "--force"]) == 0
    assert "#data=" in capsys.readouterr().out

    assert _run(["--config", str(config), "capacity", str(path)]) == 1
    report = json.loads(capsys.readouterr().out)
    assert report["over_limit"] is True
    assert report["limit"] == 256


def test_capacity_within_budget(state_file, capsys) -> None:
    assert _run(["capacity", str(state_file)]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["level"] == "ok"
    assert report["limit"] == 8000
    assert report["bytes"] > 0


def test_open_rejects_bad_url(capsys) -> None:
    assert _run(["open", "https://example.com/#data=not-a-payload"]) == 2
    assert capsys.readouterr().out == ""


def test_open_rejects_invalid_state(capsys) -> None:
    url = to_share_url({"v": 2, "url": "u", "viewport": 1, "pins": "nope"})
    assert _run(["open", url]) == 2


def test_invalid_state_file_exits_with_error(tmp_path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text('{"v": 7}', encoding="utf-8")
    assert _run(["share", str(bad)]) == 2
    assert _run(["capacity", str(tmp_path / "missing.json")]) == 2


def test_print_config(tmp_path, capsys) -> None:
    config = tmp_path / "pinment.yml"
    config.write_text("share:\n  base_url: https://hub.example.org/\n", encoding="utf-8")
    assert _run(["--config", str(config), "print-config"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["share"]["base_url"] == "https://hub.example.org/"
    assert out["anchor"]["ratio_precision"] == 3
