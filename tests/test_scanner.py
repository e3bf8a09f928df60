import pytest

from sdkfoundry.pipelines.models import IngestStats
from sdkfoundry.pipelines.scanner import (
    RepositoryLayoutError,
    SourceScanner,
    find_commit,
    find_package_version,
    validate_repository,
)


def test_validate_repository_accepts_checkout(sdk_repo, settings):
    assert validate_repository(sdk_repo, settings) == sdk_repo.resolve()


def test_validate_repository_rejects_missing_path(tmp_path, settings):
    with pytest.raises(RepositoryLayoutError, match="does not exist"):
        validate_repository(tmp_path / "nowhere", settings)


def test_validate_repository_requires_packages_dir(tmp_path, settings):
    with pytest.raises(RepositoryLayoutError, match="missing packages/"):
        validate_repository(tmp_path, settings)


def test_validate_repository_requires_core_package(tmp_path, settings):
    (tmp_path / "packages" / "glxf").mkdir(parents=True)
    with pytest.raises(RepositoryLayoutError, match="packages/core"):
        validate_repository(tmp_path, settings)


def test_package_version_and_commit(sdk_repo, settings):
    assert find_package_version(sdk_repo, settings) == "0.2.1"
    assert find_commit(sdk_repo) == "abc123def"


def test_version_and_commit_fallbacks(tmp_path, settings):
    (tmp_path / "packages" / "core").mkdir(parents=True)
    assert find_package_version(tmp_path, settings) == "0.1.0"
    assert find_commit(tmp_path) == "local"


def test_commit_from_packed_refs(tmp_path):
    git = tmp_path / ".git"
    git.mkdir()
    (git / "HEAD").write_text("ref: refs/heads/main\n")
    (git / "packed-refs").write_text("# pack-refs\nfeedbeef refs/heads/main\n")
    assert find_commit(tmp_path) == "feedbeef"


def test_scanner_walks_sources_in_sorted_order(sdk_repo, settings):
    stats = IngestStats()
    units = list(SourceScanner(sdk_repo, settings, stats).iter_package('core'))

    assert [u.relative_path for u in units] == [
        "packages/core/src/components/audio.ts",
        "packages/core/src/components/interaction.ts",
        "packages/core/src/components/physics.ts",
        "packages/core/src/systems/grab.ts",
        "packages/core/src/systems/physics.ts",
    ]
    assert all(u.package == "@iwsdk/core" for u in units)
    assert stats.files_scanned == 5


def test_scanner_skips_packages_without_sources(sdk_repo, settings):
    stats = IngestStats()
    units = list(SourceScanner(sdk_repo, settings, stats).iter_all())

    assert {u.package for u in units} == {"@iwsdk/core", "@iwsdk/xr-input"}
    assert stats.packages_skipped == ["glxf", "locomotor"]


def test_scanner_walks_are_independent(sdk_repo, settings):
    scanner = SourceScanner(sdk_repo, settings)
    first = list(scanner.iter_package('core'))
    second = list(scanner.iter_package('core'))
    assert [u.relative_path for u in first] == [u.relative_path for u in second]


def test_unreadable_file_is_counted(sdk_repo, settings):
    (sdk_repo / "packages" / "core" / "src" / "binary.ts").write_bytes(b"\xff\xfe\x00bad")
    stats = IngestStats()

    units = list(SourceScanner(sdk_repo, settings, stats).iter_package('core'))

    assert "packages/core/src/binary.ts" not in [u.relative_path for u in units]
    assert stats.files_unreadable == 1
