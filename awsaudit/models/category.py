"""Resource category model describing one read-only listing query."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple

ResourceRecord = Tuple[Any, ...]


class OutputFormat(Enum):
    """How a category's report artifact renders its records."""

    TABLE = "table"
    COUNT = "count"


@dataclass(frozen=True)
class ResourceCategory:
    """A named AWS resource type to audit.

    The query is expressed as a boto3 operation plus JMESPath expressions, the
    same way the AWS CLI ``--query`` option projects a response.

    Attributes:
        name: Slug used as the report file stem (e.g., "ec2_instances")
        title: Human-readable label used in the digest (e.g., "EC2 instances")
        service: boto3 service name (e.g., "ec2")
        operation: Read-only boto3 operation (e.g., "describe_instances")
        items: JMESPath expression selecting the item list from a response page
        fields: Ordered (header, JMESPath) pairs applied to each item
        count_field: Single JMESPath expression used by the count-only query
        is_global: Global services are queried without a region
        params: Extra keyword arguments passed to the operation
        output_format: Tabular listing or scalar count
    """

    name: str
    title: str
    service: str
    operation: str
    items: str
    fields: Tuple[Tuple[str, str], ...]
    count_field: str
    is_global: bool = False
    params: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)
    output_format: OutputFormat = OutputFormat.TABLE

    def __post_init__(self) -> None:
        if not self.fields:
            raise ValueError(f"Category {self.name} must declare at least one field")

    @property
    def headers(self) -> List[str]:
        """Column headers in projection order."""
        return [header for header, _ in self.fields]

    @property
    def record_query(self) -> str:
        """Multi-select JMESPath expression producing one list per item."""
        expressions = ", ".join(expression for _, expression in self.fields)
        return f"{self.items}.[{expressions}]"

    @property
    def count_query(self) -> str:
        """Minimal single-field projection used to count items.

        Each item maps to a one-element list, so items missing the field still count.
        """
        return f"{self.items}.[{self.count_field}]"

    def scope(self, region: str) -> str:
        """Describe where the category is queried, for logs and headers."""
        return "global" if self.is_global else region
