"""Feature entity and toggle strategy binding.

A ``Feature`` owns its local properties, its ordered toggle strategies and
its ACL. A ``ToggleStrategy`` only binds a strategy kind and a property bag
to its owning feature; evaluation lives in the application layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from vexilla.foundation.domain.properties import Property
from vexilla.foundation.domain.security import Acl


@dataclass
class ToggleStrategy:
    """Pluggable decision binding attached to exactly one feature.

    Attributes:
        feature_uid: Uid of the owning feature (reference, not ownership).
        kind: Strategy identifier resolved by the evaluator registry.
        properties: Strategy configuration bag keyed by property uid.
    """

    feature_uid: str
    kind: str
    properties: dict[str, Property[Any]] = field(default_factory=dict)

    @classmethod
    def of(
        cls,
        feature_uid: str,
        kind: str,
        properties: list[Property[Any]] | None = None,
    ) -> ToggleStrategy:
        return cls(
            feature_uid=feature_uid,
            kind=kind,
            properties={p.uid: p for p in properties or ()},
        )


@dataclass
class Feature:
    """Named capability with a static enabled flag and optional toggle logic.

    The uid is immutable once set.

    Attributes:
        uid: Feature identifier.
        enabled: Static on/off state.
        description: Optional free text.
        group: Optional group name used for bulk toggling.
        properties: Feature-local properties keyed by uid.
        toggle_strategies: Ordered strategy bindings.
        acl: Feature-level access overrides.
    """

    uid: str
    enabled: bool = False
    description: str | None = None
    group: str | None = None
    properties: dict[str, Property[Any]] = field(default_factory=dict)
    toggle_strategies: list[ToggleStrategy] = field(default_factory=list)
    acl: Acl = field(default_factory=Acl)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "uid" and "uid" in self.__dict__ and value != self.__dict__["uid"]:
            msg = f"Feature uid is immutable (was '{self.__dict__['uid']}')"
            raise AttributeError(msg)
        super().__setattr__(name, value)

    def toggle_on(self) -> None:
        self.enabled = True

    def toggle_off(self) -> None:
        self.enabled = False

    def add_property(self, prop: Property[Any]) -> None:
        self.properties[prop.uid] = prop

    def add_toggle_strategy(self, kind: str, properties: list[Property[Any]] | None = None) -> None:
        self.toggle_strategies.append(ToggleStrategy.of(self.uid, kind, properties))
