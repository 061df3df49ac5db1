import json

import pytest

from webtools import cli
from webtools.services.normalizer import DirectContext

from tests._helpers import BackendStub, unreachable_transport


def _lines(capsys):
    return [json.loads(line) for line in capsys.readouterr().out.splitlines()]


def test_classify_prints_one_record_per_id(capsys):
    assert cli.main(["classify", "ai-story-generator", "hex-to-rgb"]) == 0

    records = _lines(capsys)
    assert records[0] == {
        "id": "ai-story-generator",
        "category": "Writing",
        "archetype": "text",
        "description": "Generate creative ai story generator with AI",
        "featured": True,
    }
    assert records[1]["category"] == "Dev"
    assert records[1]["archetype"] == "form"


def test_static_catalog_with_filters(capsys):
    assert cli.main(["catalog", "--static-only", "--category", "Image"]) == 0

    assert [tool["slug"] for tool in _lines(capsys)] == ["image-compressor", "image-resizer"]


def test_static_catalog_featured(capsys):
    cli.main(["catalog", "--static-only", "--featured", "--archetype", "file"])

    assert [tool["slug"] for tool in _lines(capsys)] == ["image-compressor"]


def test_unknown_subcommand_exits():
    with pytest.raises(SystemExit):
        cli.main(["frobnicate"])


class TestCall:
    @pytest.fixture
    def stub(self, monkeypatch):
        stub = BackendStub()
        monkeypatch.setattr(
            cli, "_context", lambda settings, relay: DirectContext("http://backend.test", transport=stub.transport)
        )
        return stub

    def test_successful_call(self, stub, capsys):
        stub.add(
            "POST",
            "/api/v1/agents/process/story-generator",
            json={"status": "success", "content": "A tale", "agent_id": "story-generator"},
        )

        exit_code = cli.main(["call", "story-generator", "Write a story", "--max-tokens", "200"])

        assert exit_code == 0
        assert _lines(capsys) == [{"success": True, "content": "A tale", "agentId": "story-generator"}]
        assert stub.last_json()["settings"] == {"temperature": 0.9, "top_p": 0.9, "max_tokens": 200}

    def test_failed_call_exits_non_zero(self, stub, capsys):
        stub.add("POST", "/api/v1/agents/process/story-generator", json={"error": "Agent not found"}, status_code=404)

        assert cli.main(["call", "story-generator", "x"]) == 1
        assert _lines(capsys) == [{"success": False, "error": "Agent not found"}]

    def test_upload(self, stub, capsys, tmp_path):
        image = tmp_path / "photo.png"
        image.write_bytes(b"\x89PNG")
        stub.add(
            "POST",
            "/api/v1/agents/process/image-compressor",
            json={"success": True, "downloadUrl": "/files/photo.png"},
        )

        assert cli.main(["upload", "image-compressor", str(image)]) == 0
        assert _lines(capsys) == [{"success": True, "downloadUrl": "/files/photo.png"}]
        assert b"image/png" in stub.last_request.content


def test_call_reports_unreachable_backend(monkeypatch, capsys):
    monkeypatch.setattr(
        cli, "_context", lambda settings, relay: DirectContext("http://backend.test", transport=unreachable_transport())
    )

    assert cli.main(["call", "story-generator", "x"]) == 1
    assert "backend" in _lines(capsys)[0]["error"].lower()


def test_relay_flag_selects_relay_context():
    settings = cli.get_settings()
    context = cli._context(settings, "http://relay.test/")

    assert context.name == "relay"
    assert context.process_path("story-generator") == "/api/tools/story-generator"
    assert cli._context(settings, None).name == "direct"
