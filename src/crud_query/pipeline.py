"""QueryPipeline — parse, validate and compile one request's query."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from .compiler import QueryCompiler
from .exceptions import ValidationError
from .parser import QueryIntentParser
from .settings import QuerySettings
from .validator import QueryValidator

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .intent import QueryIntent
    from .parser import RawParams
    from .plan import Predicate, QueryPlan
    from .policy import FieldPolicy

logger = logging.getLogger("crud_query.pipeline")


class QueryPipeline:
    """
    raw params -> parser -> intent -> validator -> sanitized intent
    -> compiler -> plan.

    Stateless apart from its settings; one instance can serve every
    endpoint and every request.
    """

    def __init__(self, settings: QuerySettings | None = None) -> None:
        self.settings = settings or QuerySettings()
        self._parser = QueryIntentParser(
            default_page_size=self.settings.default_page_size
        )
        self._validator = QueryValidator(
            default_bounds=self.settings.page_size_bounds,
            max_page=self.settings.max_page,
        )
        self._compiler = QueryCompiler(
            self.settings.dialect, default_order=self.settings.default_order
        )

    def parse(self, raw_params: RawParams) -> QueryIntent:
        return self._parser.parse(raw_params)

    def validate(self, intent: QueryIntent, policy: FieldPolicy) -> QueryIntent:
        return self._validator.validate(intent, policy)

    def compile(
        self, intent: QueryIntent, *, constraints: Iterable[Predicate] = ()
    ) -> QueryPlan:
        return self._compiler.compile(intent, constraints=constraints)

    def build(
        self,
        raw_params: RawParams,
        policy: FieldPolicy,
        *,
        constraints: Iterable[Predicate] = (),
    ) -> tuple[QueryIntent, QueryPlan]:
        """
        Run the whole pipeline.

        Returns:
            The sanitized intent and its compiled plan.

        Raises:
            ValidationError: If the request violates *policy*.
        """
        start = time.perf_counter()
        intent = self.parse(raw_params)
        try:
            sanitized = self.validate(intent, policy)
        except ValidationError:
            elapsed = (time.perf_counter() - start) * 1000
            logger.info("Query rejected after %.2fms", elapsed)
            raise
        plan = self.compile(sanitized, constraints=constraints)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("Query plan built in %.2fms", elapsed)
        return sanitized, plan
