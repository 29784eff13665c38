"""
Plan Builder

Purpose
-------
Convert a flat list of planned actions into an execution-ready, deterministic
sequence:
  1) creates and updates: schemas -> tables -> users
  2) deletes: users -> tables -> schemas

Notes:
-----
- Within a kind, resources are ordered by resource key.
- Deletes run last so nothing is removed before its replacement exists.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from src.pinot_engine.plan.actions import Action, CreateResource, DeleteResource, UpdateResource


@dataclass(frozen=True)
class Plan:
    """An ordered, execution-ready sequence of actions."""

    actions: tuple[Action, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.actions

    def count(self, action_type: type[Action]) -> int:
        return sum(1 for a in self.actions if isinstance(a, action_type))

    def summary(self) -> str:
        return (
            f"create={self.count(CreateResource)}, "
            f"update={self.count(UpdateResource)}, "
            f"delete={self.count(DeleteResource)}"
        )


class PlanBuilder:
    """
    Order actions so dependencies are satisfied:
      - schemas exist before the tables that use them, tables before users
        that reference them
      - deletes in the reverse direction, after everything else
    """

    def build(self, actions: Iterable[Action]) -> Plan:
        applies: list[Action] = []
        deletes: list[Action] = []
        for action in actions:
            if isinstance(action, DeleteResource):
                deletes.append(action)
            else:
                applies.append(action)

        applies.sort(key=lambda a: (a.kind.apply_rank, a.resource_key))
        deletes.sort(key=lambda a: (-a.kind.apply_rank, a.resource_key))
        return Plan(actions=(*applies, *deletes))
