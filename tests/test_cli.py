"""Tests for the sct command line."""

import json
from unittest.mock import patch

from PIL import Image
from typer.testing import CliRunner

from sct import __version__
from sct.cli.app import app
from sct.translation.registry import EngineRegistry

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_languages_lists_codes():
    result = runner.invoke(app, ["languages"])
    assert result.exit_code == 0
    assert "zh-Hans" in result.output


def test_translate_rejects_unknown_language(tmp_path):
    image = tmp_path / "shot.png"
    segments = tmp_path / "shot.json"
    result = runner.invoke(
        app, ["translate", str(image), "--segments", str(segments), "--to", "klingon"]
    )
    assert result.exit_code == 1
    assert "Unsupported language" in result.output


def test_translate_missing_image(tmp_path):
    result = runner.invoke(
        app, ["translate", str(tmp_path / "nope.png"), "--segments", str(tmp_path / "x.json")]
    )
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_translate_end_to_end(tmp_path, stub_provider):
    image_path = tmp_path / "shot.png"
    Image.new("RGB", (400, 200), (255, 255, 255)).save(image_path)
    segments_path = tmp_path / "shot.json"
    segments_path.write_text(
        json.dumps({"segments": [{"text": "Hello", "box": [0.1, 0.1, 0.3, 0.1]}]}),
        encoding="utf-8",
    )
    registry = EngineRegistry([stub_provider("ollama", {"Hello": "Bonjour"}, local=True)])

    with patch("sct.translation.registry.build_registry", return_value=registry):
        result = runner.invoke(
            app,
            ["translate", str(image_path), "--segments", str(segments_path), "--to", "fr"],
        )

    assert result.exit_code == 0, result.output
    assert "Bonjour" in result.output
    out_path = tmp_path / "shot.translated.png"
    assert out_path.is_file()
    with Image.open(out_path) as rendered:
        assert rendered.size == (400, 200)


def test_translate_no_text_exits_nonzero(tmp_path, stub_provider):
    image_path = tmp_path / "shot.png"
    Image.new("RGB", (100, 100)).save(image_path)
    segments_path = tmp_path / "shot.json"
    segments_path.write_text('{"segments": []}', encoding="utf-8")
    registry = EngineRegistry([stub_provider("ollama", local=True)])

    with patch("sct.translation.registry.build_registry", return_value=registry):
        result = runner.invoke(app, ["translate", str(image_path), "--segments", str(segments_path)])

    assert result.exit_code == 1
    assert "No text was found" in result.output


def test_text_plain(stub_provider):
    registry = EngineRegistry([stub_provider("ollama", {"Thanks": "Merci"}, local=True)])

    with patch("sct.translation.registry.build_registry", return_value=registry):
        result = runner.invoke(app, ["text", "Thanks", "--to", "fr", "--plain"])

    assert result.exit_code == 0, result.output
    assert result.output.strip().splitlines()[-1] == "Merci"


def test_engines_table(stub_provider):
    registry = EngineRegistry(
        [stub_provider("ollama", local=True), stub_provider("mtran", available=False)]
    )

    with patch("sct.translation.registry.build_registry", return_value=registry):
        result = runner.invoke(app, ["engines"])

    assert result.exit_code == 0, result.output
    assert "ollama" in result.output
    assert "mtran" in result.output
