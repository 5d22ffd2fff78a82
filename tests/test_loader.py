"""Tests for the search index loader."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from documenter_search.loader import SearchIndexLoader
from documenter_search.store import MalformedIndexError

ARTIFACT = (
    'var documenterSearchIndex = {"docs":[{"location":"api/#Public","page":"API reference",'
    '"title":"Public","text":"","category":"section"},{"location":"","page":"Home","title":"Home",'
    '"text":"Getting started","category":"page"}]}'
)


@pytest.fixture
def loader() -> SearchIndexLoader:
    """Create a loader instance.

    Returns:
        SearchIndexLoader instance.
    """
    return SearchIndexLoader()


def _write_site(site_dir: Path, version: str | None = None, content: str = ARTIFACT) -> Path:
    """Write a minimal built documentation site.

    Args:
        site_dir: Site root directory.
        version: Optional version directory.
        content: search_index.js content.

    Returns:
        Path to the written index file.
    """
    base = site_dir / version if version else site_dir
    base.mkdir(parents=True, exist_ok=True)
    index_path = base / "search_index.js"
    index_path.write_text(content, encoding="utf-8")
    return index_path


def test_load_from_path(loader: SearchIndexLoader, tmp_path: Path) -> None:
    """Test loading from a site root."""
    _write_site(tmp_path / "build")

    store = loader.load_from_path(tmp_path / "build")

    assert len(store) == 2
    assert store.all()[0].location == "api/#Public"


def test_load_from_path_with_version(loader: SearchIndexLoader, tmp_path: Path) -> None:
    """Test loading from a version directory of a deployed site."""
    _write_site(tmp_path / "site", version="dev")

    store = loader.load_from_path(tmp_path / "site", version="dev")

    assert store.pages() == ["API reference", "Home"]


def test_load_from_path_nonexistent(loader: SearchIndexLoader, tmp_path: Path) -> None:
    """Test that a nonexistent site path raises an error."""
    with pytest.raises(ValueError, match="Documentation site path does not exist"):
        loader.load_from_path(tmp_path / "nonexistent")


def test_load_from_path_missing_index(loader: SearchIndexLoader, tmp_path: Path) -> None:
    """Test that a site without a search index raises an error."""
    (tmp_path / "site").mkdir()

    with pytest.raises(FileNotFoundError, match="Search index not found"):
        loader.load_from_path(tmp_path / "site")


def test_load_from_path_malformed(loader: SearchIndexLoader, tmp_path: Path) -> None:
    """Test that a malformed artifact propagates MalformedIndexError."""
    _write_site(tmp_path / "site", content='var documenterSearchIndex = {"pages": []}')

    with pytest.raises(MalformedIndexError, match="missing top-level field"):
        loader.load_from_path(tmp_path / "site")


def test_load_from_path_custom_field(tmp_path: Path) -> None:
    """Test loading an artifact with a different top-level field."""
    _write_site(tmp_path / "site", content='{"entries": [{"location": "a/"}]}')

    store = SearchIndexLoader(field="entries").load_from_path(tmp_path / "site")

    assert len(store) == 1


def test_load_from_git(loader: SearchIndexLoader) -> None:
    """Test that load_from_git clones and loads from the cloned site."""

    def fake_clone(repo_url: str, target_path: Path, branch: str, version: str | None, shallow: bool) -> None:
        _write_site(target_path, version=version)

    with patch.object(loader, "_clone_repository", side_effect=fake_clone) as mock_clone:
        store = loader.load_from_git("https://example.org/Pkg.jl.git")

    assert len(store) == 2
    args = mock_clone.call_args[0]
    assert args[0] == "https://example.org/Pkg.jl.git"
    assert args[2] == "gh-pages"
    assert args[3] == "dev"


@patch("subprocess.run")
def test_clone_repository(mock_run: Mock, loader: SearchIndexLoader, tmp_path: Path) -> None:
    """Test that clone_repository runs correct git commands."""
    target_path = tmp_path / "site"

    loader._clone_repository("https://example.org/Pkg.jl.git", target_path, "gh-pages", "dev", shallow=True)

    assert mock_run.call_count == 2
    clone_cmd = mock_run.call_args_list[0][0][0]
    assert clone_cmd[:2] == ["git", "clone"]
    assert "--sparse" in clone_cmd
    assert "--branch" in clone_cmd
    assert "gh-pages" in clone_cmd

    sparse_cmd = mock_run.call_args_list[1][0][0]
    assert "sparse-checkout" in sparse_cmd
    assert sparse_cmd[-1] == "dev"


@patch("subprocess.run")
def test_clone_repository_without_sparse(mock_run: Mock, loader: SearchIndexLoader, tmp_path: Path) -> None:
    """Test clone without sparse checkout."""
    loader._clone_repository("https://example.org/Pkg.jl.git", tmp_path / "site", "gh-pages", "dev", shallow=False)

    assert mock_run.call_count == 1
    clone_cmd = mock_run.call_args[0][0]
    assert "clone" in clone_cmd
    assert "--depth" not in clone_cmd


@patch("subprocess.run")
def test_clone_repository_site_root(mock_run: Mock, loader: SearchIndexLoader, tmp_path: Path) -> None:
    """Test that a shallow clone of the site root skips sparse checkout."""
    loader._clone_repository("https://example.org/Pkg.jl.git", tmp_path / "site", "gh-pages", None, shallow=True)

    assert mock_run.call_count == 1
    clone_cmd = mock_run.call_args[0][0]
    assert "--depth" in clone_cmd
    assert "--sparse" not in clone_cmd


def test_load_from_path_regular_file(loader: SearchIndexLoader, tmp_path: Path) -> None:
    """Test that a file given as the site path is reported as such."""
    site_file = tmp_path / "site.html"
    site_file.write_text("<html></html>", encoding="utf-8")

    with pytest.raises(ValueError, match="is not a directory"):
        loader.load_from_path(site_file)
