"""Read and write site configuration documents.

Configuration files are YAML (``.yaml``/``.yml``) or JSON, chosen by
extension. YAML is parsed with ruamel.yaml: the safe loader for read-only
use, and the round-trip loader when the document will be rewritten so that
comments, key order, and quoting survive the asset stage's URL rewrites. JSON
goes through the standard library's :mod:`json`.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import json
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .._constants import DEFAULT_CONFIG_NAMES, YAML_SUFFIXES
from ..validation import validate_site_config
from .models import SiteConfig, SiteConfigError


class ConfigLoadError(ValueError):
    """Raised when a configuration file is missing or cannot be parsed."""


class ConfigWriteError(RuntimeError):
    """Raised when a rewritten configuration cannot be persisted."""


class ConfigFormat(enum.StrEnum):
    """Serialization formats understood by the loader."""

    YAML = "yaml"
    JSON = "json"


@dc.dataclass(slots=True)
class ConfigDocument:
    """A parsed configuration file together with where it came from."""

    path: Path
    format: ConfigFormat
    data: typ.Any

    @property
    def directory(self) -> Path:
        """Directory containing the configuration file."""
        return self.path.parent


def detect_format(path: Path) -> ConfigFormat:
    """Return the format implied by ``path``'s extension."""
    if path.suffix.lower() in YAML_SUFFIXES:
        return ConfigFormat.YAML
    return ConfigFormat.JSON


def find_default_config(project_dir: Path) -> Path | None:
    """Return ``config.yaml`` (or ``config.yml``) inside ``project_dir``."""
    for name in DEFAULT_CONFIG_NAMES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    return None


def load_config_document(path: Path, *, round_trip: bool = False) -> ConfigDocument:
    """Load a configuration file.

    Parameters
    ----------
    path : Path
        Location of the YAML or JSON configuration file.
    round_trip : bool, optional
        Parse YAML with the round-trip loader so the document can be written
        back with its formatting intact. Ignored for JSON.

    Returns
    -------
    ConfigDocument
        The parsed data and its detected format.

    Raises
    ------
    ConfigLoadError
        If the file does not exist, cannot be parsed, or its top level is not
        a mapping.
    """
    resolved = path.expanduser().resolve()
    if not resolved.is_file():
        msg = f"Config file not found: {resolved}"
        raise ConfigLoadError(msg)

    config_format = detect_format(resolved)
    try:
        raw = resolved.read_bytes()
    except OSError as exc:
        msg = f"Unable to read config file {resolved}: {exc}"
        raise ConfigLoadError(msg) from exc

    match config_format:
        case ConfigFormat.YAML:
            data = _parse_yaml(raw, resolved, round_trip=round_trip)
        case ConfigFormat.JSON:
            data = _parse_json(raw, resolved)

    if not isinstance(data, dict):
        msg = f"Top-level structure of {resolved} must be a mapping."
        raise ConfigLoadError(msg)
    return ConfigDocument(path=resolved, format=config_format, data=data)


def load_site_config(path: Path) -> SiteConfig:
    """Load, validate, and convert a configuration file into a typed tree.

    Raises
    ------
    ConfigLoadError
        If the file cannot be read or parsed.
    SiteConfigError
        If validation reports errors. The message lists every issue.
    """
    document = load_config_document(path)
    report = validate_site_config(document.data)
    if not report.valid:
        details = "\n".join(f"  - {issue}" for issue in report.errors)
        msg = f"Invalid site configuration in {document.path}:\n{details}"
        raise SiteConfigError(msg)
    return SiteConfig.from_mapping(document.data)


def save_config_document(document: ConfigDocument) -> None:
    """Serialize ``document.data`` back to ``document.path``."""
    try:
        match document.format:
            case ConfigFormat.YAML:
                yaml = _build_roundtrip_yaml()
                with document.path.open("w", encoding="utf-8") as handle:
                    yaml.dump(document.data, handle)
            case ConfigFormat.JSON:
                encoded = json.dumps(document.data, indent=2, ensure_ascii=False)
                document.path.write_text(encoded + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        msg = f"Failed to write updated config to {document.path}: {exc}"
        raise ConfigWriteError(msg) from exc


def _parse_yaml(raw: bytes, path: Path, *, round_trip: bool) -> typ.Any:
    if round_trip:
        loader = _build_roundtrip_yaml()
    else:
        loader = YAML(typ="safe")
        loader.version = (1, 2)
    try:
        return loader.load(raw.decode("utf-8")) or {}
    except UnicodeDecodeError as exc:
        msg = f"Config file {path} is not valid UTF-8: {exc}"
        raise ConfigLoadError(msg) from exc
    except YAMLError as exc:
        msg = f"Failed to parse YAML in {path}: {exc}"
        raise ConfigLoadError(msg) from exc


def _parse_json(raw: bytes, path: Path) -> typ.Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        msg = f"Config file {path} is not valid JSON: {exc}"
        raise ConfigLoadError(msg) from exc


def _build_roundtrip_yaml() -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    yaml.width = 120
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


__all__ = [
    "ConfigDocument",
    "ConfigFormat",
    "ConfigLoadError",
    "ConfigWriteError",
    "detect_format",
    "find_default_config",
    "load_config_document",
    "load_site_config",
    "save_config_document",
]
