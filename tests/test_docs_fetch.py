from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from sdkfoundry.config import Settings
from sdkfoundry.pipelines.docs_fetch import DocsFetcher, is_error_page, main, provenance_header
from sdkfoundry.sources import DocSourceConfig, DocumentRef

BODY = "# IWSDK Overview\n\n" + "The Immersive Web SDK brings ECS to WebXR. " * 5


def response(text: str, status: int = 200) -> Mock:
    mock = Mock()
    mock.text = text
    mock.status_code = status
    mock.ok = status < 400
    return mock


@pytest.fixture
def source():
    return DocSourceConfig(
        name="test_docs",
        base_url="https://docs.example.com/web",
        documents=[DocumentRef(path="iwsdk-overview.md", name="overview.md"),
                   DocumentRef(path="iwsdk-ecs.md", name="ecs.md")],
        title="Example Docs",
    )


@pytest.fixture
def session():
    mock = Mock(spec=requests.Session)
    mock.headers = {}
    return mock


def test_fetch_writes_document_with_provenance(settings, session, source, tmp_path):
    session.get.side_effect = [response(BODY), response("", 404)]
    fetcher = DocsFetcher(settings, session, tmp_path / "docs")

    report = fetcher.fetch_all([source])

    assert (report.success, report.failed) == (1, 1)
    text = (tmp_path / "docs" / "overview.md").read_text()
    assert text.startswith("<!--\nSource: Example Docs\nURL: https://docs.example.com/web/iwsdk-overview.md/\n")
    assert text.endswith(BODY)
    assert not (tmp_path / "docs" / "ecs.md").exists()
    session.get.assert_any_call("https://docs.example.com/web/iwsdk-overview.md/", timeout=30)


def test_rejects_error_pages_short_bodies_and_network_errors(settings, session, source, tmp_path):
    fetcher = DocsFetcher(settings, session, tmp_path)
    doc = source.documents[0]

    session.get.return_value = response("<!DOCTYPE html><html><head><title>Error</title></head>" + "x" * 200)
    assert fetcher.fetch_document(source, doc) is None

    session.get.return_value = response("too short")
    assert fetcher.fetch_document(source, doc) is None

    session.get.side_effect = requests.ConnectionError("offline")
    assert fetcher.fetch_document(source, doc) is None


def test_is_error_page():
    assert is_error_page("<!DOCTYPE html><title>Error</title>")
    assert not is_error_page("<!DOCTYPE html><title>IWSDK</title>")
    assert not is_error_page("# Error\nmarkdown body")


def test_provenance_header_defaults():
    source = DocSourceConfig(name="s", base_url="https://x.test", documents=[DocumentRef("a", "a.md")])
    header = provenance_header("https://x.test/a/", source, datetime(2024, 1, 2, tzinfo=timezone.utc))

    assert "Source: Meta Developers - Official IWSDK Documentation" in header
    assert "Fetched: 2024-01-02T00:00:00Z" in header
    assert header.endswith("-->\n\n")


def test_user_agent_is_set(settings, session):
    DocsFetcher(settings, session)
    assert session.headers["User-Agent"] == "SDKFoundry/1.0"


def test_cli_unknown_source_fails(tmp_path, capsys):
    assert main(["--cache-dir", str(tmp_path), "--source", "nope", "--log-level", "ERROR"]) == 1
    assert "Documentation fetch failed" in capsys.readouterr().err


@pytest.mark.parametrize("names", [None, ["official_docs"]])
def test_configured_base_url_applies_to_loaded_sources(tmp_path, session, names):
    settings = Settings(
        config_path=str(tmp_path / "missing.yaml"),
        overrides={'cache_dir': str(tmp_path / "cache"), 'docs': {'base_url': "https://mirror.example.com/docs"}},
    )

    sources = DocsFetcher(settings, session).load_sources(names)

    assert [s.name for s in sources] == ["official_docs"]
    assert sources[0].base_url == "https://mirror.example.com/docs"
