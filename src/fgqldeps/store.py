"""On-disk store of analysis results, one JSON file per schema identifier plus an index."""

import hashlib
import json
import shutil
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from fgqldeps import log
from fgqldeps.analyzer.models import AnalysisResult

FGQLDEPS_HOME = Path.home() / ".fgqldeps"
DEFAULT_CACHE_DIR = FGQLDEPS_HOME / "cache"
INDEX_FILENAME = "index.json"


class AnalysisNotFoundError(LookupError):
    """Raised when no stored analysis matches a lookup."""


class IndexEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    schema_identifier: str
    analyzed_at: str
    total_types: int
    total_dependencies: int


class AnalysisStore:
    """Persists AnalysisResults keyed by schema identifier; the last write for an identifier wins.

    Args:
        cache_dir: Directory holding the stored results and the index.
    """

    def __init__(self, cache_dir: Path = DEFAULT_CACHE_DIR) -> None:
        self.cache_dir = cache_dir

    @staticmethod
    def cache_key(schema_identifier: str) -> str:
        return hashlib.md5(schema_identifier.encode("utf-8")).hexdigest()

    @property
    def index_path(self) -> Path:
        return self.cache_dir / INDEX_FILENAME

    def result_path(self, schema_identifier: str) -> Path:
        return self.cache_dir / f"{self.cache_key(schema_identifier)}.json"

    def _read_index(self) -> dict[str, dict[str, Any]]:
        if not self.index_path.exists():
            return {}
        index = json.loads(self.index_path.read_text(encoding="utf-8"))
        if not isinstance(index, dict):
            raise ValueError(f"Expected JSON object in {self.index_path}, got {type(index).__name__}")
        return index

    def _write_index(self, index: dict[str, dict[str, Any]]) -> None:
        self.index_path.write_text(json.dumps(index, indent=2), encoding="utf-8")

    def put(self, result: AnalysisResult) -> Path:
        """Store a result and record it in the index.

        Returns:
            Path of the stored result file
        """
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        metadata = result.metadata
        path = self.result_path(metadata.schema_identifier)
        path.write_text(result.model_dump_json(by_alias=True, indent=2), encoding="utf-8")

        index = self._read_index()
        index[metadata.schema_identifier] = {
            "analyzedAt": metadata.analyzed_at.isoformat(),
            "totalTypes": metadata.total_types,
            "totalDependencies": metadata.total_dependencies,
        }
        self._write_index(index)
        log.debug(f"Stored analysis of {metadata.schema_identifier} in {path}")
        return path

    def has(self, schema_identifier: str) -> bool:
        return self.result_path(schema_identifier).exists()

    def get(self, schema_identifier: str) -> AnalysisResult:
        """Load the stored result of a schema.

        Raises:
            AnalysisNotFoundError: If the schema has not been analyzed
        """
        path = self.result_path(schema_identifier)
        if not path.exists():
            raise AnalysisNotFoundError(f"No stored analysis found for: {schema_identifier}")
        return AnalysisResult.model_validate_json(path.read_text(encoding="utf-8"))

    def list_entries(self) -> list[IndexEntry]:
        """Index entries of every stored analysis, most recent first."""
        entries = [
            IndexEntry.model_validate({"schemaIdentifier": identifier, **metadata})
            for identifier, metadata in self._read_index().items()
        ]
        return sorted(entries, key=lambda entry: entry.analyzed_at, reverse=True)

    def most_recent(self) -> AnalysisResult:
        """Load the most recently analyzed schema.

        Raises:
            AnalysisNotFoundError: If nothing has been analyzed yet
        """
        entries = self.list_entries()
        if not entries:
            raise AnalysisNotFoundError('No analyzed schemas found. Run "fgqldeps analyze <schema>" first.')
        return self.get(entries[0].schema_identifier)

    def resolve(self, schema_identifier: str | None = None) -> AnalysisResult:
        """The stored result of a given schema, or the most recent one."""
        if schema_identifier:
            return self.get(schema_identifier)
        return self.most_recent()

    def clear(self) -> None:
        if self.cache_dir.exists():
            shutil.rmtree(self.cache_dir)
        log.debug(f"Cleared {self.cache_dir}")
