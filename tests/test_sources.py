import pytest

from sdkfoundry.sources import DocSourceConfig, DocumentRef, SourceConfigError, SourceLoader


def test_bundled_source_loads():
    loader = SourceLoader()
    assert "official_docs" in loader.list_sources()

    config = loader.load_source_config("official_docs")
    assert config.base_url.startswith("https://")
    assert config.documents[0].name == "overview.md"
    assert config.enabled


def test_only_enabled_sources_are_returned(tmp_path):
    (tmp_path / "alpha.yaml").write_text(
        "name: alpha\nbase_url: https://a.test\ndocuments:\n  - {path: p, name: p.md}\n")
    (tmp_path / "beta.yaml").write_text(
        "name: beta\nbase_url: https://b.test\nenabled: false\ndocuments:\n  - {path: p, name: p.md}\n")

    sources = SourceLoader(tmp_path).load_enabled_sources()
    assert [s.name for s in sources] == ["alpha"]


def test_name_defaults_to_file_stem(tmp_path):
    (tmp_path / "mine.yaml").write_text("base_url: https://a.test\ndocuments:\n  - {path: p, name: p.md}\n")
    assert SourceLoader(tmp_path).load_source_config("mine").name == "mine"


@pytest.mark.parametrize("content,message", [
    ("", "Empty source configuration"),
    ("name: x\nbase_url: [broken\n", "Invalid YAML"),
    ("name: x\ndocuments: []\n", "Missing required key"),
    ("name: x\nbase_url: ftp://a.test\ndocuments:\n  - {path: p, name: p.md}\n", "Invalid base URL"),
    ("name: x\nbase_url: https://a.test\ndocuments: []\n", "at least one document"),
])
def test_invalid_definitions(tmp_path, content, message):
    (tmp_path / "x.yaml").write_text(content)
    with pytest.raises(SourceConfigError, match=message):
        SourceLoader(tmp_path).load_source_config("x")


def test_missing_definition(tmp_path):
    with pytest.raises(SourceConfigError, match="not found"):
        SourceLoader(tmp_path).load_source_config("absent")


def test_document_names_cannot_escape_cache_dir():
    with pytest.raises(SourceConfigError):
        DocumentRef(path="p", name="../evil.md")


def test_document_url_and_round_trip():
    doc = DocumentRef(path="iwsdk-overview.md", name="overview.md")
    assert doc.url("https://a.test/web/") == "https://a.test/web/iwsdk-overview.md/"

    config = DocSourceConfig(name="s", base_url="https://a.test", documents=[doc], title="T")
    assert DocSourceConfig.from_dict(config.to_dict()) == config
