"""Resource collector for one audit category."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Iterator, List, Optional

import jmespath
from botocore.exceptions import ClientError

from ..aws.client import create_boto_client
from ..models.audit_config import AuditConfig
from ..models.audit_run import CategoryResult
from ..models.category import ResourceCategory, ResourceRecord

logger = logging.getLogger(__name__)


def describe_error(error: Exception) -> str:
    """Short description of a provider error for reports and the digest."""
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        code = details.get("Code", "Unknown")
        message = details.get("Message") or str(error)
        return f"{code}: {message}"
    return f"{type(error).__name__}: {error}"


def normalize_value(value: Any) -> Any:
    """Flatten provider values into something a report cell can hold.

    Tag lists become "Key=Value" strings and timestamps become ISO-8601.
    """
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, list) and all(isinstance(v, dict) and "Key" in v for v in value):
        return ", ".join(f"{tag['Key']}={tag.get('Value', '')}" for tag in value)
    return value


class ResourceCollector:
    """Runs the read-only listing query for a category.

    Every invocation creates its own client and session.
    """

    def __init__(self, client_factory: Optional[Callable[..., Any]] = None) -> None:
        """Initialize the collector.

        Args:
            client_factory: Callable(service, region=..., profile=...) returning a
                boto3 client (defaults to create_boto_client)
        """
        self.client_factory = client_factory or create_boto_client

    def _create_client(self, category: ResourceCategory, config: AuditConfig) -> Any:
        return self.client_factory(category.service, region=config.region_for(category), profile=config.profile)

    def _pages(self, client: Any, category: ResourceCategory) -> Iterator[dict]:
        """Yield response pages, using the paginator when the operation has one."""
        if client.can_paginate(category.operation):
            paginator = client.get_paginator(category.operation)
            yield from paginator.paginate(**category.params)
        else:
            yield getattr(client, category.operation)(**category.params)

    def _search(self, category: ResourceCategory, config: AuditConfig, expression: str) -> List[Any]:
        compiled = jmespath.compile(expression)
        client = self._create_client(category, config)
        matches: List[Any] = []
        for page in self._pages(client, category):
            matches.extend(compiled.search(page) or [])
        return matches

    def collect(self, category: ResourceCategory, config: AuditConfig) -> CategoryResult:
        """Collect the projected records for a category.

        Records keep the provider's order. Query failures are returned as a
        failed result rather than raised.

        Args:
            category: Category to query
            config: Audit configuration (profile and region)

        Returns:
            CategoryResult with the records, or a failure with an error description
        """
        scope = category.scope(config.region)
        try:
            rows = self._search(category, config, category.record_query)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"Error collecting {category.name} ({scope}): {error_code}")
            return CategoryResult.failure(category.name, describe_error(e))
        except Exception as e:
            logger.error(f"Error collecting {category.name} ({scope}): {e}")
            return CategoryResult.failure(category.name, describe_error(e))

        records: List[ResourceRecord] = [tuple(normalize_value(value) for value in row) for row in rows]
        logger.debug(f"Collected {len(records)} {category.name} records ({scope})")
        return CategoryResult.success(category.name, records)

    def count(self, category: ResourceCategory, config: AuditConfig) -> int:
        """Count a category's items using its minimal single-field projection.

        Raises:
            ClientError: Or any other SDK error; callers decide how to report it
        """
        total = len(self._search(category, config, category.count_query))
        logger.debug(f"Counted {total} {category.name} ({category.scope(config.region)})")
        return total
