"""Vexilla Infra Codec -- configuration documents in YAML and JSON."""

from vexilla.infra.codec.document import ROOT_TAG, export_mapping, parse_mapping
from vexilla.infra.codec.parsers import (
    ConfigurationParser,
    JsonConfigurationParser,
    YamlConfigurationParser,
)

__all__ = [
    "ROOT_TAG",
    "ConfigurationParser",
    "JsonConfigurationParser",
    "YamlConfigurationParser",
    "export_mapping",
    "parse_mapping",
]
