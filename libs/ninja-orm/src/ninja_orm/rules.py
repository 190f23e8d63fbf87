"""Per-entity validation rules run at flush time."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Union

RuleResult = Union[str, None]
Rule = Callable[[Any], Union[RuleResult, Awaitable[RuleResult]]]


class EntityConfig:
    """Registry for the validation rules of one entity class.

    A rule receives the entity and returns ``None`` when it passes or an error
    message when it fails. Rules may be coroutine functions.

    Example::

        publisher_config = EntityConfig()
        publisher_config.add_rule("authors", lambda p: "Too many" if len(p.authors) > 12 else None)
    """

    def __init__(self) -> None:
        self._rules: list[tuple[str | None, Rule]] = []

    def add_rule(self, trigger: str | Rule, rule: Rule | None = None) -> None:
        """Register ``rule``, optionally tagged with the field or relation it checks.

        A relation trigger is loaded by ``EntityManager.flush()`` before the rule runs.
        """
        if rule is None:
            if isinstance(trigger, str):
                raise TypeError("add_rule() needs a rule callable")
            self._rules.append((None, trigger))
        else:
            if not isinstance(trigger, str):
                raise TypeError("add_rule() trigger must be a field or relation name")
            self._rules.append((trigger, rule))

    @property
    def rules(self) -> list[tuple[str | None, Rule]]:
        return list(self._rules)

    async def validate(self, entity: Any) -> list[str]:
        """Run every rule against ``entity`` and return the failure messages."""
        errors: list[str] = []
        for _, rule in self._rules:
            result = rule(entity)
            if inspect.isawaitable(result):
                result = await result
            if result:
                errors.append(result)
        return errors
