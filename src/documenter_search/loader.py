"""Loader for search indexes from built or deployed documentation sites."""

import logging
import subprocess
import tempfile
from pathlib import Path

from documenter_search.artifact import ArtifactParser
from documenter_search.store import DEFAULT_FIELD, IndexStore, load

logger = logging.getLogger(__name__)


class SearchIndexLoader:
    """Loads a documentation site's search_index.js into an IndexStore."""

    INDEX_FILENAME = "search_index.js"
    DEPLOY_BRANCH = "gh-pages"
    DEFAULT_VERSION = "dev"

    def __init__(self, field: str = DEFAULT_FIELD) -> None:
        """Initialise loader.

        Args:
            field: Top-level artifact field holding the entries.
        """
        self.field = field
        self.parser = ArtifactParser()

    def load_from_path(self, site_path: Path, version: str | None = None) -> IndexStore:
        """Load the search index of a locally built documentation site.

        Args:
            site_path: Root of the built site.
            version: Optional version directory within the site (e.g. 'dev', 'v1.2.0').

        Returns:
            Loaded IndexStore.

        Raises:
            ValueError: If the site path is not an existing directory.
            FileNotFoundError: If no search index is found.
        """
        if not site_path.is_dir():
            msg = f"Documentation site path does not exist or is not a directory: {site_path}"
            raise ValueError(msg)

        index_path = self._find_index(site_path, version)
        logger.info("Loading search index from %s", index_path)
        raw = self.parser.parse_file(index_path)
        return load(raw, field=self.field)

    def load_from_git(
        self,
        repo_url: str,
        branch: str = DEPLOY_BRANCH,
        version: str | None = DEFAULT_VERSION,
        shallow: bool = True,
    ) -> IndexStore:
        """Clone a deployed documentation branch and load its search index.

        Args:
            repo_url: Git repository URL.
            branch: Branch holding the deployed site.
            version: Version directory within the site, or None for the site root.
            shallow: Whether to do a shallow, sparse clone.

        Returns:
            Loaded IndexStore.
        """
        with tempfile.TemporaryDirectory() as temp_dir:
            repo_path = Path(temp_dir) / "site"
            self._clone_repository(repo_url, repo_path, branch, version, shallow)
            return self.load_from_path(repo_path, version)

    def _find_index(self, site_path: Path, version: str | None) -> Path:
        """Locate the search index file.

        Args:
            site_path: Root of the built site.
            version: Optional version directory.

        Returns:
            Path to the search index file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        base = site_path / version if version else site_path
        index_path = base / self.INDEX_FILENAME
        if not index_path.is_file():
            msg = f"Search index not found: {index_path}"
            raise FileNotFoundError(msg)
        return index_path

    def _clone_repository(
        self,
        repo_url: str,
        target_path: Path,
        branch: str,
        version: str | None,
        shallow: bool,
    ) -> None:
        """Clone the documentation branch.

        Args:
            repo_url: Git repository URL.
            target_path: Directory to clone into.
            branch: Git branch to clone.
            version: Version directory to check out for sparse clones.
            shallow: Whether to do a shallow clone.
        """
        sparse = shallow and bool(version)
        cmd = ["git", "clone"]
        if shallow:
            cmd.extend(["--depth", "1"])
        if sparse:
            cmd.extend(["--filter=blob:none", "--sparse"])
        cmd.extend(["--branch", branch, repo_url, str(target_path)])

        logger.info("Cloning %s (branch %s)...", repo_url, branch)
        subprocess.run(cmd, check=True, capture_output=True)  # noqa: S603

        # For sparse checkout, specify only the version directory
        if sparse and version:
            logger.info("Setting up sparse checkout for %s directory...", version)
            subprocess.run(  # noqa: S603
                ["git", "-C", str(target_path), "sparse-checkout", "set", version],  # noqa: S607
                check=True,
                capture_output=True,
            )

        logger.info("Repository cloned successfully")
