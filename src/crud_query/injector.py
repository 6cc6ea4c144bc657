"""ConstraintInjector — build mandatory owner/tenant constraints for a query."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import ConstraintError
from .operators import PlanOperator
from .plan import Comparison

if TYPE_CHECKING:
    from collections.abc import Callable


class ConstraintInjector:
    """Produces trusted predicates to pass as ``compile(..., constraints=...)``."""

    def __init__(
        self,
        *,
        get_tenant_id: Callable[[], Any] | None = None,
        get_owner_id: Callable[[], Any] | None = None,
        tenant_field: str = "tenantId",
        owner_field: str = "userId",
        require_tenant: bool = True,
        require_owner: bool = False,
    ) -> None:
        """
        Initialize ConstraintInjector.

        Args:
            get_tenant_id: Callable that returns the current tenant ID.
            get_owner_id: Callable that returns the current owner ID.
            tenant_field: Field name for the tenant constraint.
            owner_field: Field name for the owner constraint.
            require_tenant: Raise if ``get_tenant_id`` returns ``None``.
            require_owner: Raise if ``get_owner_id`` returns ``None``.
        """
        self._get_tenant_id = get_tenant_id
        self._get_owner_id = get_owner_id
        self._tenant_field = tenant_field
        self._owner_field = owner_field
        self._require_tenant = require_tenant
        self._require_owner = require_owner

    def constraints(self) -> tuple[Comparison, ...]:
        """Return the equality constraints for the current context."""
        found: list[Comparison] = []
        if self._get_tenant_id:
            tenant = self._get_tenant_id()
            if tenant is not None:
                found.append(Comparison(self._tenant_field, PlanOperator.EQ, tenant))
            elif self._require_tenant:
                raise ConstraintError("Tenant context is required")
        if self._get_owner_id:
            owner = self._get_owner_id()
            if owner is not None:
                found.append(Comparison(self._owner_field, PlanOperator.EQ, owner))
            elif self._require_owner:
                raise ConstraintError("Owner context is required")
        return tuple(found)
