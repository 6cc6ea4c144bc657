from enum import Enum


class FilterOperator(str, Enum):
    """Operator tokens accepted in ``field[op]`` filter keys."""

    EQUALS = "equals"
    IN = "in"
    CONTAINS = "contains"
    GTE = "gte"
    LTE = "lte"
    GT = "gt"
    LT = "lt"
    BETWEEN = "between"


class RangeOperator(str, Enum):
    """Sub-operators of a range filter."""

    GTE = "gte"
    LTE = "lte"
    GT = "gt"
    LT = "lt"
    BETWEEN = "between"


class PlanOperator(str, Enum):
    """Leaf comparison operators of a compiled query plan."""

    EQ = "eq"
    IN = "in"
    LIKE = "like"
    ILIKE = "ilike"
    GTE = "gte"
    LTE = "lte"
    GT = "gt"
    LT = "lt"
    BETWEEN = "between"

    # Logical
    AND = "and"
    OR = "or"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PaginationMode(str, Enum):
    OFFSET = "offset"
    CURSOR = "cursor"


class CursorDirection(str, Enum):
    NEXT = "next"
    PREV = "prev"


class Dialect(str, Enum):
    """SQL dialects; only used to pick ``like`` vs ``ilike``."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    MARIADB = "mariadb"

    @property
    def case_insensitive_like(self) -> bool:
        return self is Dialect.POSTGRES


RANGE_TO_PLAN: dict[RangeOperator, PlanOperator] = {
    RangeOperator.GTE: PlanOperator.GTE,
    RangeOperator.LTE: PlanOperator.LTE,
    RangeOperator.GT: PlanOperator.GT,
    RangeOperator.LT: PlanOperator.LT,
    RangeOperator.BETWEEN: PlanOperator.BETWEEN,
}
