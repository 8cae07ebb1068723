"""View parameters controlling which rows the table displays.

ViewSpec values are immutable: every user interaction (header click, field
selector change, typing in the filter box) produces a new ViewSpec that is
passed to the pipeline in full.
"""

from dataclasses import dataclass, field, replace

from patient_dashboard.logging_audit import get_logger
from patient_dashboard.models.record import RECORD_FIELDS

logger = get_logger(__name__)

FILTER_ALL = "all"
FILTER_AGE = "age"

TEXT_OPERATORS = ("contains", "equals")
AGE_OPERATORS = ("=", ">=", "<=")

# Record fields that can be sorted on or filtered individually
VIEW_FIELDS = tuple(name for name in RECORD_FIELDS if name != "id")
DATE_FIELDS = ("date_of_birth", "created_at")

DEFAULT_SORT_FIELD = "created_at"


def default_operator(filter_field: str) -> str:
    """Return the operator a freshly selected filter field starts with."""
    if filter_field == FILTER_AGE:
        return AGE_OPERATORS[0]
    return TEXT_OPERATORS[0]


def operators_for(filter_field: str) -> tuple[str, ...]:
    """Return the operators offered for a filter field."""
    if filter_field == FILTER_AGE:
        return AGE_OPERATORS
    return TEXT_OPERATORS


@dataclass(frozen=True)
class SortSpec:
    """The single active sort key.

    Attributes:
        field: Record field to sort by
        descending: Sort direction
    """

    field: str = DEFAULT_SORT_FIELD
    descending: bool = True

    def __post_init__(self) -> None:
        """Validate the sort field."""
        if self.field not in VIEW_FIELDS:
            raise ValueError(
                f"Invalid sort field: {self.field}. "
                f"Must be one of: {', '.join(VIEW_FIELDS)}"
            )

    def toggled(self) -> "SortSpec":
        """Return the same key with the opposite direction."""
        return replace(self, descending=not self.descending)


@dataclass(frozen=True)
class ViewSpec:
    """Current sort and filter parameters.

    Attributes:
        sort: Active sort key; there is always exactly one
        filter_field: ``all``, ``age`` or a record field name
        operator: ``contains``/``equals`` for text, ``=``/``>=``/``<=`` for age
        filter_value: Raw filter text as typed
    """

    sort: SortSpec = field(default_factory=SortSpec)
    filter_field: str = FILTER_ALL
    operator: str = TEXT_OPERATORS[0]
    filter_value: str = ""

    def toggle_sort(self, field_name: str) -> "ViewSpec":
        """Handle a click on a column header.

        Clicking the active column flips its direction; clicking another
        column makes it the active key, ascending.

        Raises:
            ValueError: If the field is not sortable
        """
        if field_name == self.sort.field:
            return replace(self, sort=self.sort.toggled())
        return replace(self, sort=SortSpec(field=field_name, descending=False))

    def clear_sort(self) -> "ViewSpec":
        """Refuse to remove the last sort key; the current one is kept."""
        logger.debug(f"Sort removal ignored, keeping {self.sort.field}")
        return self

    def with_filter_field(self, filter_field: str) -> "ViewSpec":
        """Select a filter field, resetting operator and value for its kind."""
        return replace(
            self,
            filter_field=filter_field,
            operator=default_operator(filter_field),
            filter_value="",
        )

    def with_operator(self, operator: str) -> "ViewSpec":
        return replace(self, operator=operator)

    def with_filter_value(self, filter_value: str) -> "ViewSpec":
        return replace(self, filter_value=filter_value)
