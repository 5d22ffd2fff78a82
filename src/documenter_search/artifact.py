"""Parser for generated documentation search index artifacts."""

import json
import re
from pathlib import Path
from typing import Any

from documenter_search.store import MalformedIndexError


class ArtifactParser:
    """Decodes search_index.js payloads into plain Python structures."""

    # e.g. "var documenterSearchIndex = {...}"
    ASSIGNMENT_RE = re.compile(r"^\s*(?:(?:var|let|const)\s+)?[A-Za-z_$][\w$.]*\s*=\s*")

    def parse(self, source: str) -> Any:
        """Decode an artifact payload.

        Args:
            source: Artifact text, either a JavaScript assignment or plain JSON.

        Returns:
            Decoded nested structure.

        Raises:
            MalformedIndexError: If the payload cannot be decoded.
        """
        payload = self._strip_assignment(source)
        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            msg = f"Search index payload is not valid JSON: {exc}"
            raise MalformedIndexError(msg) from exc

    def parse_file(self, file_path: Path) -> Any:
        """Read and decode an artifact file.

        Args:
            file_path: Path to the artifact.

        Returns:
            Decoded nested structure.

        Raises:
            MalformedIndexError: If the file cannot be read or decoded.
        """
        try:
            source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Unable to read search index: {file_path}"
            raise MalformedIndexError(msg) from exc
        return self.parse(source)

    def _strip_assignment(self, source: str) -> str:
        """Remove a leading variable assignment and trailing semicolon.

        Args:
            source: Raw artifact text.

        Returns:
            JSON payload text.
        """
        payload = self.ASSIGNMENT_RE.sub("", source.lstrip("\ufeff"), count=1)
        payload = payload.strip()
        if payload.endswith(";"):
            payload = payload[:-1]
        return payload
