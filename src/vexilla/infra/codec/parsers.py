"""Text format parsers for configuration documents.

``ConfigurationParser`` handles sources (text, bytes, streams, files) and
delegates structure to the mapping codec. Concrete parsers only decide how
text becomes a document and back.

Usage:
    from vexilla.infra.codec import YamlConfigurationParser

    parser = YamlConfigurationParser()
    config = parser.parse_file("flags.yml")
    text = parser.export(config)
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

import yaml

from vexilla.foundation.domain.exceptions import ParseError
from vexilla.infra.codec.document import ROOT_TAG, export_mapping, parse_mapping

if TYPE_CHECKING:
    from vexilla.foundation.domain.configuration import Configuration

Source = str | bytes | IO[str] | IO[bytes]


class ConfigurationParser(ABC):
    """Parse and export a Configuration in one text format.

    Args:
        root_tag: Top-level key holding the configuration.
    """

    def __init__(self, root_tag: str = ROOT_TAG) -> None:
        self._root_tag = root_tag

    @abstractmethod
    def load(self, text: str) -> Any:
        """Turn text into a document.

        Raises:
            ParseError: If the text is not valid in this format.
        """

    @abstractmethod
    def dump(self, document: dict[str, Any]) -> str:
        """Turn a document into text."""

    def parse(self, source: Source) -> Configuration:
        """Read a Configuration from text, bytes or a readable stream."""
        if not isinstance(source, (str, bytes)):
            source = source.read()
        if isinstance(source, bytes):
            source = source.decode("utf-8")
        return parse_mapping(self.load(source), self._root_tag)

    def parse_file(self, path: str | Path) -> Configuration:
        """Read a Configuration from a UTF-8 file."""
        with Path(path).open(encoding="utf-8") as stream:
            return self.parse(stream)

    def export(self, config: Configuration) -> str:
        """Serialize a Configuration to text."""
        return self.dump(export_mapping(config, self._root_tag))

    def export_file(self, config: Configuration, path: str | Path) -> None:
        """Serialize a Configuration to a UTF-8 file."""
        Path(path).write_text(self.export(config), encoding="utf-8")


class YamlConfigurationParser(ConfigurationParser):
    """YAML format, read with ``yaml.safe_load``."""

    def load(self, text: str) -> Any:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ParseError("document", f"invalid YAML: {exc}") from exc

    def dump(self, document: dict[str, Any]) -> str:
        return yaml.safe_dump(
            document,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )


class JsonConfigurationParser(ConfigurationParser):
    """JSON format."""

    def load(self, text: str) -> Any:
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError("document", f"invalid JSON: {exc.msg}", line=exc.lineno) from exc

    def dump(self, document: dict[str, Any]) -> str:
        return json.dumps(document, indent=2, ensure_ascii=False)
