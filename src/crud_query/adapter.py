"""IPlanAdapter — protocol for backend-specific translation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .plan import QueryPlan


@runtime_checkable
class IPlanAdapter(Protocol):
    """Translate a ``QueryPlan`` to a backend-specific query.

    Examples include SQL ``SELECT`` constructs or MongoDB filter documents.
    Values must always be passed as bound parameters.
    """

    def to_backend_query(self, plan: QueryPlan) -> Any:
        """Return backend-native query structure."""
        ...
