from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field

from fgqldeps import log


class AnalyzerConfig(BaseModel):
    """Settings read from a YAML file; CLI options take precedence over them.

    Example:

        cacheDir: ~/.cache/fgqldeps
        subgraph: products
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    cache_dir: Path | None = Field(None, alias="cacheDir")
    subgraph: str | None = None


def load_analyzer_config(config_path: Path | None) -> AnalyzerConfig:
    """
    Read analyzer settings from a YAML file.

    A missing path, an empty file and a document holding only `null` all give the defaults.
    A leading `~` in `cacheDir` is expanded.

    Raises:
        OSError: The file cannot be read.
        yaml.YAMLError: The file is not YAML.
        TypeError: The document is not a mapping.
        ValidationError: A key is unknown or a value has the wrong type.
    """
    if config_path is None:
        return AnalyzerConfig()

    document: Any = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    log.debug(f"Read analyzer config {config_path}")

    if not document:
        return AnalyzerConfig()
    if not isinstance(document, dict):
        raise TypeError(f"Analyzer config root must be a mapping, got {type(document).__name__}")

    config = AnalyzerConfig.model_validate(cast(dict[str, Any], document))
    if config.cache_dir is not None:
        config.cache_dir = config.cache_dir.expanduser()
    return config
