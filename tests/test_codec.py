"""Tests for the configuration codec and its YAML and JSON parsers."""

from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING

import pytest
import yaml

from vexilla.foundation.domain.configuration import Configuration
from vexilla.foundation.domain.exceptions import (
    InvalidPropertyValueError,
    ParseError,
    PropertyTypeError,
)
from vexilla.foundation.domain.features import Feature
from vexilla.foundation.domain.permissions import Permission
from vexilla.foundation.domain.properties import IntegerProperty
from vexilla.infra.codec import (
    JsonConfigurationParser,
    YamlConfigurationParser,
    export_mapping,
    parse_mapping,
)

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.unit
class TestFlagAScenario:
    def test_parse_flag_a(self, flag_a_yaml: str) -> None:
        config = YamlConfigurationParser().parse(flag_a_yaml)
        feature = config.features["flag-A"]

        assert feature.enabled is True
        assert feature.group == "beta"
        assert list(feature.properties) == ["threshold"]
        threshold = feature.properties["threshold"]
        assert isinstance(threshold, IntegerProperty)
        assert threshold.value == 10
        assert threshold.fixed_values == frozenset({5, 10, 15})

    def test_re_export_yields_identical_feature(self, flag_a_yaml: str) -> None:
        parser = YamlConfigurationParser()
        config = parser.parse(flag_a_yaml)
        again = parser.parse(parser.export(config))
        assert again.features["flag-A"] == config.features["flag-A"]
        assert again == config

    def test_sections(self, flag_a_yaml: str) -> None:
        config = YamlConfigurationParser().parse(flag_a_yaml)
        assert config.audit is True
        assert config.auto_create is False
        assert config.roles["admin"].permissions == {Permission.ADMIN, Permission.TOGGLE_FEATURE}
        assert config.users["alice"].first_name == "Alice"
        assert config.users["alice"].roles == {"admin"}
        assert config.properties["maxConnections"].value == 20


@pytest.mark.unit
class TestRoundTrip:
    @pytest.mark.parametrize("parser_cls", [YamlConfigurationParser, JsonConfigurationParser])
    def test_full_configuration(
        self, parser_cls: type[YamlConfigurationParser], sample_configuration: Configuration
    ) -> None:
        parser = parser_cls()
        assert parser.parse(parser.export(sample_configuration)) == sample_configuration

    @pytest.mark.parametrize("parser_cls", [YamlConfigurationParser, JsonConfigurationParser])
    def test_empty_configuration(self, parser_cls: type[YamlConfigurationParser]) -> None:
        parser = parser_cls()
        assert parser.parse(parser.export(Configuration())) == Configuration()

    def test_feature_without_strategies_or_acl(self) -> None:
        config = Configuration()
        config.add_feature(Feature(uid="plain", enabled=True))
        document = export_mapping(config)
        assert document["vexilla"]["features"] == [{"uid": "plain", "enable": True}]
        assert parse_mapping(document) == config

    def test_custom_root_tag(self, sample_configuration: Configuration) -> None:
        parser = YamlConfigurationParser(root_tag="flags")
        text = parser.export(sample_configuration)
        assert "flags" in yaml.safe_load(text)
        assert parser.parse(text) == sample_configuration


@pytest.mark.unit
class TestDocumentMapping:
    def test_empty_document(self) -> None:
        assert parse_mapping(None) == Configuration()
        assert parse_mapping({}) == Configuration()

    def test_missing_sections_are_empty(self) -> None:
        config = parse_mapping({"vexilla": {"features": [{"uid": "f"}]}})
        assert config.roles == {}
        assert config.users == {}
        assert config.properties == {}
        assert config.features == {"f": Feature(uid="f")}

    def test_audit_takes_boolean_value(self) -> None:
        assert parse_mapping({"vexilla": {"audit": False}}).audit is False
        assert parse_mapping({"vexilla": {"audit": "true"}}).audit is True

    def test_scalar_values_are_stringified(self) -> None:
        config = parse_mapping(
            {
                "vexilla": {
                    "properties": [
                        {"name": "on", "type": "bool", "value": True},
                        {"name": "ratio", "type": "double", "value": 0.5},
                        {"name": "users", "type": "list", "value": ["alice", "bob"]},
                    ]
                }
            }
        )
        assert config.properties["on"].as_string() == "true"
        assert config.properties["ratio"].value == 0.5
        assert config.properties["users"].value == ("alice", "bob")

    def test_yaml_dates_are_accepted(self) -> None:
        config = YamlConfigurationParser().parse(
            "vexilla:\n  properties:\n    - name: release\n      type: date\n      value: 2024-06-01\n"
        )
        assert config.properties["release"].as_string() == "2024-06-01"

    def test_toggle_strategy_owner_is_feature(self) -> None:
        config = parse_mapping(
            {
                "vexilla": {
                    "features": [
                        {
                            "uid": "flag-A",
                            "toggleStrategies": [
                                {
                                    "class": "percentage",
                                    "properties": [{"name": "weight", "type": "int", "value": 30}],
                                },
                                {"class": "release_date"},
                            ],
                        }
                    ]
                }
            }
        )
        strategies = config.features["flag-A"].toggle_strategies
        assert [s.kind for s in strategies] == ["percentage", "release_date"]
        assert all(s.feature_uid == "flag-A" for s in strategies)
        assert strategies[0].properties["weight"].value == 30
        assert strategies[1].properties == {}


@pytest.mark.unit
class TestParseErrors:
    def test_property_without_name(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_mapping({"vexilla": {"properties": [{"value": "1"}]}})
        assert exc_info.value.field == "properties.name"

    def test_property_without_value(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_mapping({"vexilla": {"properties": [{"name": "p"}]}})
        assert exc_info.value.field == "properties.value"

    def test_role_without_permissions(self) -> None:
        with pytest.raises(ParseError, match="permissions"):
            parse_mapping({"vexilla": {"roles": [{"name": "admin"}]}})

    def test_user_without_uid(self) -> None:
        with pytest.raises(ParseError, match="uid"):
            parse_mapping({"vexilla": {"users": [{"firstname": "Alice"}]}})

    def test_strategy_without_class(self) -> None:
        with pytest.raises(ParseError, match="class"):
            parse_mapping({"vexilla": {"features": [{"uid": "f", "toggleStrategies": [{}]}]}})

    def test_unknown_permission_token(self) -> None:
        with pytest.raises(ParseError, match="FLY"):
            parse_mapping({"vexilla": {"roles": [{"name": "r", "permissions": ["FLY"]}]}})

    def test_wrong_container_type(self) -> None:
        with pytest.raises(ParseError):
            parse_mapping({"vexilla": {"features": {"uid": "f"}}})

    def test_non_mapping_root(self) -> None:
        with pytest.raises(ParseError):
            parse_mapping({"vexilla": ["a", "b"]})

    def test_unknown_property_type(self) -> None:
        with pytest.raises(PropertyTypeError):
            parse_mapping(
                {"vexilla": {"properties": [{"name": "p", "type": "not.a.real.Type", "value": 1}]}}
            )

    def test_value_outside_fixed_values(self) -> None:
        document = {
            "vexilla": {
                "properties": [
                    {"name": "p", "type": "int", "value": 7, "fixedValues": [5, 10, 15]}
                ]
            }
        }
        with pytest.raises(InvalidPropertyValueError):
            parse_mapping(document)

    def test_invalid_yaml(self) -> None:
        with pytest.raises(ParseError):
            YamlConfigurationParser().parse("vexilla: [unclosed")

    def test_invalid_json(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            JsonConfigurationParser().parse('{"vexilla": ')
        assert exc_info.value.context["line"] == 1


@pytest.mark.unit
class TestSources:
    def test_bytes_and_streams(self, flag_a_yaml: str) -> None:
        parser = YamlConfigurationParser()
        expected = parser.parse(flag_a_yaml)
        assert parser.parse(flag_a_yaml.encode("utf-8")) == expected
        assert parser.parse(io.StringIO(flag_a_yaml)) == expected
        assert parser.parse(io.BytesIO(flag_a_yaml.encode("utf-8"))) == expected

    def test_empty_json_text(self) -> None:
        assert JsonConfigurationParser().parse("  ") == Configuration()

    def test_files(self, tmp_path: Path, sample_configuration: Configuration) -> None:
        parser = JsonConfigurationParser()
        path = tmp_path / "flags.json"
        parser.export_file(sample_configuration, path)
        assert json.loads(path.read_text(encoding="utf-8"))["vexilla"]["audit"] is True
        assert parser.parse_file(path) == sample_configuration
