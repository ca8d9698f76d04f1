"""Row mapping between domain entities and flag table rows.

Nested feature parts are stored in their document form so the SQL backend
and the configuration codec share one kind resolution.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from vexilla.foundation.domain.features import Feature
from vexilla.foundation.domain.permissions import Permission, sorted_permissions
from vexilla.foundation.domain.properties import Property, create_property, kind_of
from vexilla.foundation.domain.security import Role, User
from vexilla.infra.codec.document import (
    export_acl,
    export_property,
    export_toggle_strategy,
    parse_acl,
    parse_properties,
    parse_toggle_strategy,
)

if TYPE_CHECKING:
    from collections.abc import Mapping


def property_to_row(prop: Property[Any]) -> dict[str, Any]:
    return {
        "uid": prop.uid,
        "kind": kind_of(prop),
        "value": prop.as_string(),
        "description": prop.description,
        "fixed_values": prop.fixed_values_as_strings() or None,
    }


def property_from_row(row: Mapping[str, Any]) -> Property[Any]:
    return create_property(
        row["uid"],
        row["value"],
        kind=row["kind"],
        description=row["description"],
        fixed_values=row["fixed_values"] or None,
    )


def feature_to_row(feature: Feature) -> dict[str, Any]:
    return {
        "uid": feature.uid,
        "enabled": feature.enabled,
        "description": feature.description,
        "group_name": feature.group,
        "properties": [export_property(p) for p in feature.properties.values()],
        "strategies": [export_toggle_strategy(s) for s in feature.toggle_strategies],
        "acl": export_acl(feature.acl),
    }


def feature_from_row(row: Mapping[str, Any]) -> Feature:
    uid = row["uid"]
    feature = Feature(
        uid=uid,
        enabled=bool(row["enabled"]),
        description=row["description"],
        group=row["group_name"],
        properties=parse_properties(row["properties"], "properties"),
        acl=parse_acl(row["acl"], "acl"),
    )
    for item in row["strategies"] or []:
        feature.toggle_strategies.append(parse_toggle_strategy(uid, item, "strategies"))
    return feature


def role_to_row(role: Role) -> dict[str, Any]:
    return {"uid": role.uid, "permissions": sorted_permissions(role.permissions)}


def role_from_row(row: Mapping[str, Any]) -> Role:
    return Role(
        uid=row["uid"],
        permissions={Permission.parse(p) for p in row["permissions"] or []},
    )


def user_to_row(user: User) -> dict[str, Any]:
    return {
        "uid": user.uid,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "description": user.description,
        "roles": sorted(user.roles),
        "permissions": sorted_permissions(user.permissions),
    }


def user_from_row(row: Mapping[str, Any]) -> User:
    return User(
        uid=row["uid"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        description=row["description"],
        roles=set(row["roles"] or []),
        permissions={Permission.parse(p) for p in row["permissions"] or []},
    )
