"""Command-line entry point."""

from __future__ import annotations

import json
from io import BytesIO

from PIL import Image

from charttile import cli
from charttile.errors import FontLoadFailure


def _write_request(tmp_path, payload) -> str:
    path = tmp_path / "request.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_cli_writes_chart(tmp_path, capsys) -> None:
    """A valid request file produces an image at the output path."""

    request = _write_request(
        tmp_path,
        {"entries": [{"title": "Low", "artist": "David Bowie", "rating": 8}], "coverSize": 120},
    )
    out = tmp_path / "out" / "chart.jpg"

    assert cli.main([request, "-o", str(out)]) == 0

    img = Image.open(BytesIO(out.read_bytes()))
    assert img.format == "JPEG"
    assert img.size == (120, 120)
    assert "Wrote:" in capsys.readouterr().out


def test_cli_rejects_bad_input(tmp_path, capsys) -> None:
    """Malformed JSON and unknown output types exit with status 2."""

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert cli.main([str(bad), "-o", str(tmp_path / "c.png")]) == 2

    good = _write_request(tmp_path, {"entries": [{"title": "t", "artist": "a"}]})
    assert cli.main([good, "-o", str(tmp_path / "c.gif")]) == 2
    assert "Unsupported output type" in capsys.readouterr().err


def test_cli_reports_render_failures(tmp_path, monkeypatch, capsys) -> None:
    """Fatal chart errors exit with status 1 and a message."""

    def missing_fonts():
        raise FontLoadFailure("Inter fonts not found.")

    monkeypatch.setattr("charttile.chart.load_fonts", missing_fonts)
    request = _write_request(tmp_path, {"entries": [{"title": "t", "artist": "a"}]})

    assert cli.main([request, "-o", str(tmp_path / "c.png")]) == 1
    assert "Error creating chart" in capsys.readouterr().err
