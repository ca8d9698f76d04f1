"""Toggle strategy evaluation.

A toggle strategy binding (see ``ToggleStrategy``) names an evaluator kind
and carries its property bag. Evaluators are pure functions of
``(properties, context) -> bool``: no hidden state, so the same bag and
context always give the same decision.

Combining the decisions of several strategies is an explicit caller choice
(``StrategyPolicy``); nothing here assumes AND or OR.

Built-in evaluators:

- ``percentage``: deterministic SHA256 bucketing on ``feature:user``.
  Properties: ``weight`` (0-100).
- ``allow_list``: context user is in the ``users`` list property.
- ``deny_list``: context user is not in the ``users`` list property.
- ``release_date``: ``context["now"]`` is at or after ``releaseDate``.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import date, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

from vexilla.foundation.domain.exceptions import UnknownStrategyError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from vexilla.foundation.domain.features import Feature, ToggleStrategy
    from vexilla.foundation.domain.properties import Property

logger = logging.getLogger(__name__)

CONTEXT_USER = "user"
CONTEXT_FEATURE = "feature"
CONTEXT_NOW = "now"


class StrategyEvaluator(Protocol):
    """Pure decision function of a toggle strategy kind."""

    def __call__(
        self,
        properties: Mapping[str, Property[Any]],
        context: Mapping[str, Any],
    ) -> bool: ...


class StrategyPolicy(StrEnum):
    """How the decisions of several strategies combine into one.

    - ``ALL``: every strategy must pass.
    - ``ANY``: at least one strategy must pass.
    - ``FIRST``: only the first strategy decides.
    """

    ALL = "all"
    ANY = "any"
    FIRST = "first"


def _evaluate_percentage_flag(subject: str, feature_key: str, rollout_percentage: int) -> bool:
    """Deterministic percentage evaluation using SHA256 consistent hashing.

    Properties:
    - Same subject + feature always returns same result (deterministic)
    - Monotonic: raising the percentage keeps previously enabled subjects
    - Feature independence: feature_key is part of the hash input

    Args:
        subject: Identifier being bucketed (user uid).
        feature_key: Feature uid.
        rollout_percentage: Target rollout percentage (0-100 inclusive).

    Returns:
        True if the subject falls within the rollout percentage bucket.
    """
    hash_input = f"{feature_key}:{subject}"
    hash_bytes = hashlib.sha256(hash_input.encode("utf-8")).digest()
    hash_int = int.from_bytes(hash_bytes[:4], byteorder="big")
    bucket = hash_int % 100
    return bucket < rollout_percentage


def _property_value(properties: Mapping[str, Property[Any]], uid: str, default: Any = None) -> Any:
    prop = properties.get(uid)
    return default if prop is None else prop.value


def percentage_strategy(properties: Mapping[str, Property[Any]], context: Mapping[str, Any]) -> bool:
    weight = int(_property_value(properties, "weight", 0))
    subject = context.get(CONTEXT_USER)
    if subject is None:
        return False
    return _evaluate_percentage_flag(str(subject), str(context.get(CONTEXT_FEATURE, "")), weight)


def _listed_users(properties: Mapping[str, Property[Any]]) -> set[str]:
    raw = _property_value(properties, "users", ())
    if isinstance(raw, str):
        raw = [item.strip() for item in raw.split(",")]
    return {str(item) for item in raw if item}


def allow_list_strategy(properties: Mapping[str, Property[Any]], context: Mapping[str, Any]) -> bool:
    return context.get(CONTEXT_USER) in _listed_users(properties)


def deny_list_strategy(properties: Mapping[str, Property[Any]], context: Mapping[str, Any]) -> bool:
    return context.get(CONTEXT_USER) not in _listed_users(properties)


def release_date_strategy(properties: Mapping[str, Property[Any]], context: Mapping[str, Any]) -> bool:
    release = _property_value(properties, "releaseDate")
    now = context.get(CONTEXT_NOW)
    if release is None or now is None:
        return False
    if isinstance(release, datetime) and isinstance(now, datetime):
        return now.replace(tzinfo=None) >= release.replace(tzinfo=None)
    if isinstance(now, datetime):
        now = now.date()
    if isinstance(release, datetime):
        release = release.date()
    return bool(isinstance(now, date) and now >= release)


class StrategyRegistry:
    """Maps strategy kind names to evaluators."""

    def __init__(self) -> None:
        self._evaluators: dict[str, StrategyEvaluator] = {}

    def register(self, kind: str, evaluator: StrategyEvaluator) -> None:
        self._evaluators[kind] = evaluator

    def kinds(self) -> list[str]:
        return sorted(self._evaluators)

    def evaluate(self, strategy: ToggleStrategy, context: Mapping[str, Any]) -> bool:
        """Evaluate one strategy binding.

        Raises:
            UnknownStrategyError: If no evaluator is registered for its kind.
        """
        evaluator = self._evaluators.get(strategy.kind)
        if evaluator is None:
            raise UnknownStrategyError(strategy.kind, feature_uid=strategy.feature_uid)
        scoped = {CONTEXT_FEATURE: strategy.feature_uid, **context}
        return bool(evaluator(strategy.properties, scoped))

    def evaluate_feature(
        self,
        feature: Feature,
        context: Mapping[str, Any],
        policy: StrategyPolicy = StrategyPolicy.ALL,
    ) -> bool:
        """Effective decision for a feature.

        A disabled feature is off. An enabled feature without strategies is
        on. Otherwise the strategy decisions combine under ``policy``.
        """
        if not feature.enabled:
            return False
        strategies = feature.toggle_strategies
        if not strategies:
            return True

        if policy is StrategyPolicy.FIRST:
            result = self.evaluate(strategies[0], context)
        elif policy is StrategyPolicy.ANY:
            result = any(self.evaluate(s, context) for s in strategies)
        else:
            result = all(self.evaluate(s, context) for s in strategies)

        logger.debug(
            "feature_evaluated",
            extra={"feature_uid": feature.uid, "policy": policy.value, "enabled": result},
        )
        return result


def default_strategy_registry() -> StrategyRegistry:
    """Registry preloaded with the built-in evaluators."""
    registry = StrategyRegistry()
    registry.register("percentage", percentage_strategy)
    registry.register("allow_list", allow_list_strategy)
    registry.register("deny_list", deny_list_strategy)
    registry.register("release_date", release_date_strategy)
    return registry
