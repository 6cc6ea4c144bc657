"""
Leaf-operator strategies for the SQLAlchemy adapter.

Each plan operator maps to one :class:`SQLAlchemyOperator`; a
:class:`SQLAlchemyOperatorRegistry` holds the mapping so that callers can
swap a single operator (e.g. a dialect-specific ``ilike``) without touching
the tree walker in :mod:`crud_query.sqla.compiler`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from ..operators import PlanOperator


class SQLAlchemyOperator(ABC):
    """Turns ``column <operator> value`` into a bound SQLAlchemy clause."""

    operator: ClassVar[PlanOperator]

    @abstractmethod
    def build(self, column: Any, value: Any) -> ColumnElement[bool]: ...


class SQLAlchemyOperatorRegistry:
    """Mapping of ``PlanOperator`` to the strategy that compiles it."""

    def __init__(self, *operators: SQLAlchemyOperator) -> None:
        self._by_operator: dict[PlanOperator, SQLAlchemyOperator] = {}
        for strategy in operators:
            self.register(strategy)

    def register(self, strategy: SQLAlchemyOperator) -> None:
        """Add *strategy*, replacing any strategy for the same operator."""
        self._by_operator[strategy.operator] = strategy

    def __contains__(self, operator: object) -> bool:
        return operator in self._by_operator

    def __iter__(self) -> Iterator[PlanOperator]:
        return iter(self._by_operator)

    @property
    def supported_operators(self) -> set[PlanOperator]:
        return set(self._by_operator)

    def copy(self) -> SQLAlchemyOperatorRegistry:
        return SQLAlchemyOperatorRegistry(*self._by_operator.values())

    def build(self, operator: PlanOperator, column: Any, value: Any) -> ColumnElement[bool]:
        """
        Compile one leaf comparison.

        Raises:
            ValueError: If no strategy is registered for *operator*.
        """
        strategy = self._by_operator.get(operator)
        if strategy is None:
            raise ValueError(f"Unsupported operator for SQLAlchemy: {operator.value}")
        return strategy.build(column, value)
