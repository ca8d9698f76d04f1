"""Mapping level codec between documents and ``Configuration``.

A document is the plain structure obtained from YAML or JSON text::

    vexilla:
      audit: true
      autocreate: false
      roles:       [{name, permissions: [...]}]
      users:       [{uid, firstname?, lastname?, description?, roles?, permissions?}]
      properties:  [{name, value, type?, description?, fixedValues?}]
      features:    [{uid, enable?, description?, groupName?, properties?,
                     toggleStrategies?: [{class, properties?}],
                     permissions?: [{name, roles?, users?}]}]

Sections are read in that order. Missing sections are empty. Exporting and
re-parsing yields a Configuration equal to the original; textual layout is
not part of the contract.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from vexilla.foundation.domain.configuration import Configuration
from vexilla.foundation.domain.exceptions import ParseError
from vexilla.foundation.domain.features import Feature, ToggleStrategy
from vexilla.foundation.domain.permissions import Permission, sorted_permissions
from vexilla.foundation.domain.properties import (
    DATE_FORMAT,
    LIST_SEPARATOR,
    Property,
    create_property,
    kind_of,
)
from vexilla.foundation.domain.security import Acl, Grantees, Role, User

logger = logging.getLogger(__name__)

ROOT_TAG = "vexilla"
AUDIT_TAG = "audit"
AUTOCREATE_TAG = "autocreate"
ROLES_TAG = "roles"
USERS_TAG = "users"
PROPERTIES_TAG = "properties"
FEATURES_TAG = "features"
PERMISSIONS_TAG = "permissions"
TOGGLE_STRATEGIES_TAG = "toggleStrategies"

ROLE_NAME = "name"
USER_UID = "uid"
USER_FIRSTNAME = "firstname"
USER_LASTNAME = "lastname"
USER_DESCRIPTION = "description"
PROPERTY_NAME = "name"
PROPERTY_VALUE = "value"
PROPERTY_TYPE = "type"
PROPERTY_DESCRIPTION = "description"
PROPERTY_FIXED_VALUES = "fixedValues"
FEATURE_UID = "uid"
FEATURE_ENABLE = "enable"
FEATURE_DESCRIPTION = "description"
FEATURE_GROUP = "groupName"
STRATEGY_CLASS = "class"
ACL_NAME = "name"
ACL_ROLES = "roles"
ACL_USERS = "users"


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _as_list(value: Any, field: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError(field, f"expected a list, got {type(value).__name__}")
    return value


def _as_mapping(value: Any, field: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ParseError(field, f"expected a mapping, got {type(value).__name__}")
    return value


def _as_bool(value: Any, field: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise ParseError(field, f"expected a boolean, got {value!r}")


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _stringify(value: Any) -> str:
    """Canonical string form of a scalar read from a document."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, list):
        return LIST_SEPARATOR.join(str(item) for item in value)
    return str(value)


def _parse_permissions(values: Any, field: str) -> set[Permission]:
    permissions: set[Permission] = set()
    for token in _as_list(values, field):
        try:
            permissions.add(Permission.parse(token))
        except ValueError as exc:
            raise ParseError(field, f"unknown permission '{token}'") from exc
    return permissions


def _require(item: Mapping[str, Any], key: str, field: str, entity: str) -> Any:
    value = item.get(key)
    if value is None:
        raise ParseError(f"{field}.{key}", f"'{key}' is expected for {entity}")
    return value


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------


def parse_roles(items: Any, field: str = ROLES_TAG) -> dict[str, Role]:
    roles: dict[str, Role] = {}
    for raw in _as_list(items, field):
        item = _as_mapping(raw, field)
        name = str(_require(item, ROLE_NAME, field, "roles"))
        if PERMISSIONS_TAG not in item:
            raise ParseError(f"{field}.{PERMISSIONS_TAG}", f"'{PERMISSIONS_TAG}' is expected for roles")
        permissions = _parse_permissions(item[PERMISSIONS_TAG], f"{field}.{PERMISSIONS_TAG}")
        roles[name] = Role(uid=name, permissions=permissions)
    return roles


def parse_users(items: Any, field: str = USERS_TAG) -> dict[str, User]:
    users: dict[str, User] = {}
    for raw in _as_list(items, field):
        item = _as_mapping(raw, field)
        uid = str(_require(item, USER_UID, field, "users"))
        users[uid] = User(
            uid=uid,
            first_name=_optional_str(item.get(USER_FIRSTNAME)),
            last_name=_optional_str(item.get(USER_LASTNAME)),
            description=_optional_str(item.get(USER_DESCRIPTION)),
            roles={str(r) for r in _as_list(item.get(ROLES_TAG), f"{field}.{ROLES_TAG}")},
            permissions=_parse_permissions(item.get(PERMISSIONS_TAG), f"{field}.{PERMISSIONS_TAG}"),
        )
    return users


def parse_property(item: Mapping[str, Any], field: str = PROPERTIES_TAG) -> Property[Any]:
    """Build one typed property from its document form.

    Raises:
        ParseError: If ``name`` or ``value`` is missing.
        PropertyTypeError: If ``type`` cannot be resolved or instantiated.
        InvalidPropertyValueError: If ``value`` is outside ``fixedValues``.
    """
    name = str(_require(item, PROPERTY_NAME, field, "properties"))
    value = _require(item, PROPERTY_VALUE, field, "properties")
    fixed_values = [
        _stringify(v)
        for v in _as_list(item.get(PROPERTY_FIXED_VALUES), f"{field}.{PROPERTY_FIXED_VALUES}")
    ]
    return create_property(
        name,
        _stringify(value),
        kind=_optional_str(item.get(PROPERTY_TYPE)),
        description=_optional_str(item.get(PROPERTY_DESCRIPTION)),
        fixed_values=fixed_values or None,
    )


def parse_properties(items: Any, field: str = PROPERTIES_TAG) -> dict[str, Property[Any]]:
    properties: dict[str, Property[Any]] = {}
    for raw in _as_list(items, field):
        prop = parse_property(_as_mapping(raw, field), field)
        properties[prop.uid] = prop
    return properties


def parse_acl(items: Any, field: str) -> Acl:
    acl = Acl()
    for raw in _as_list(items, field):
        item = _as_mapping(raw, field)
        token = _require(item, ACL_NAME, field, "permissions")
        try:
            permission = Permission.parse(token)
        except ValueError as exc:
            raise ParseError(f"{field}.{ACL_NAME}", f"unknown permission '{token}'") from exc
        acl.permissions[permission] = Grantees(
            users={str(u) for u in _as_list(item.get(ACL_USERS), f"{field}.{ACL_USERS}")},
            roles={str(r) for r in _as_list(item.get(ACL_ROLES), f"{field}.{ACL_ROLES}")},
        )
    return acl


def parse_toggle_strategy(feature_uid: str, item: Mapping[str, Any], field: str) -> ToggleStrategy:
    kind = str(_require(item, STRATEGY_CLASS, field, "toggle strategies"))
    properties = parse_properties(item.get(PROPERTIES_TAG), f"{field}.{PROPERTIES_TAG}")
    return ToggleStrategy(feature_uid=feature_uid, kind=kind, properties=properties)


def parse_features(items: Any, field: str = FEATURES_TAG) -> dict[str, Feature]:
    features: dict[str, Feature] = {}
    for raw in _as_list(items, field):
        item = _as_mapping(raw, field)
        uid = str(_require(item, FEATURE_UID, field, "feature"))
        feature = Feature(
            uid=uid,
            enabled=_as_bool(item.get(FEATURE_ENABLE), f"{field}.{FEATURE_ENABLE}"),
            description=_optional_str(item.get(FEATURE_DESCRIPTION)),
            group=_optional_str(item.get(FEATURE_GROUP)),
        )
        strategies_field = f"{field}.{TOGGLE_STRATEGIES_TAG}"
        for strategy in _as_list(item.get(TOGGLE_STRATEGIES_TAG), strategies_field):
            feature.toggle_strategies.append(
                parse_toggle_strategy(uid, _as_mapping(strategy, strategies_field), strategies_field)
            )
        if PERMISSIONS_TAG in item:
            feature.acl = parse_acl(item[PERMISSIONS_TAG], f"{field}.{PERMISSIONS_TAG}")
        feature.properties = parse_properties(item.get(PROPERTIES_TAG), f"{field}.{PROPERTIES_TAG}")
        features[uid] = feature
    return features


def parse_mapping(document: Any, root_tag: str = ROOT_TAG) -> Configuration:
    """Build a Configuration from a parsed document.

    Args:
        document: Mapping holding the configuration under ``root_tag``.
            ``None`` (an empty document) gives an empty configuration.
        root_tag: Top-level key holding the configuration.

    Raises:
        ParseError: If the document is malformed or a mandatory field is missing.
    """
    config = Configuration()
    if document is None:
        return config
    root = _as_mapping(document, "document").get(root_tag)
    if root is None:
        return config
    section = _as_mapping(root, root_tag)

    config.audit = _as_bool(section.get(AUDIT_TAG), AUDIT_TAG)
    config.auto_create = _as_bool(section.get(AUTOCREATE_TAG), AUTOCREATE_TAG)
    config.roles = parse_roles(section.get(ROLES_TAG))
    config.users = parse_users(section.get(USERS_TAG))
    config.properties = parse_properties(section.get(PROPERTIES_TAG))
    config.features = parse_features(section.get(FEATURES_TAG))

    logger.debug(
        "configuration_parsed",
        extra={
            "roles": len(config.roles),
            "users": len(config.users),
            "properties": len(config.properties),
            "features": len(config.features),
        },
    )
    return config


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def export_property(prop: Property[Any]) -> dict[str, Any]:
    item: dict[str, Any] = {
        PROPERTY_NAME: prop.uid,
        PROPERTY_TYPE: kind_of(prop),
        PROPERTY_VALUE: prop.as_string(),
    }
    if prop.description is not None:
        item[PROPERTY_DESCRIPTION] = prop.description
    if prop.fixed_values:
        item[PROPERTY_FIXED_VALUES] = prop.fixed_values_as_strings()
    return item


def export_acl(acl: Acl) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    for permission in sorted(acl.permissions):
        grantees = acl.permissions[permission]
        item: dict[str, Any] = {ACL_NAME: permission.value}
        if grantees.roles:
            item[ACL_ROLES] = sorted(grantees.roles)
        if grantees.users:
            item[ACL_USERS] = sorted(grantees.users)
        items.append(item)
    return items


def export_toggle_strategy(strategy: ToggleStrategy) -> dict[str, Any]:
    return {
        STRATEGY_CLASS: strategy.kind,
        PROPERTIES_TAG: [export_property(p) for p in strategy.properties.values()],
    }


def export_feature(feature: Feature) -> dict[str, Any]:
    item: dict[str, Any] = {FEATURE_UID: feature.uid, FEATURE_ENABLE: feature.enabled}
    if feature.description is not None:
        item[FEATURE_DESCRIPTION] = feature.description
    if feature.group is not None:
        item[FEATURE_GROUP] = feature.group
    if feature.properties:
        item[PROPERTIES_TAG] = [export_property(p) for p in feature.properties.values()]
    if feature.toggle_strategies:
        item[TOGGLE_STRATEGIES_TAG] = [export_toggle_strategy(s) for s in feature.toggle_strategies]
    if not feature.acl.is_empty():
        item[PERMISSIONS_TAG] = export_acl(feature.acl)
    return item


def export_user(user: User) -> dict[str, Any]:
    item: dict[str, Any] = {USER_UID: user.uid}
    for key, value in (
        (USER_FIRSTNAME, user.first_name),
        (USER_LASTNAME, user.last_name),
        (USER_DESCRIPTION, user.description),
    ):
        if value is not None:
            item[key] = value
    if user.roles:
        item[ROLES_TAG] = sorted(user.roles)
    if user.permissions:
        item[PERMISSIONS_TAG] = sorted_permissions(user.permissions)
    return item


def export_mapping(config: Configuration, root_tag: str = ROOT_TAG) -> dict[str, Any]:
    """Build a document from a Configuration, mirroring the parse order."""
    section: dict[str, Any] = {
        AUDIT_TAG: config.audit,
        AUTOCREATE_TAG: config.auto_create,
        ROLES_TAG: [
            {ROLE_NAME: role.uid, PERMISSIONS_TAG: sorted_permissions(role.permissions)}
            for role in config.roles.values()
        ],
        USERS_TAG: [export_user(user) for user in config.users.values()],
        PROPERTIES_TAG: [export_property(prop) for prop in config.properties.values()],
        FEATURES_TAG: [export_feature(feature) for feature in config.features.values()],
    }
    return {root_tag: section}
