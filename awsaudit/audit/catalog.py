"""Built-in catalog of auditable AWS resource categories."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..models.category import ResourceCategory
from .errors import UnknownCategoryError

# Declared order is the report and digest order.
DEFAULT_CATEGORIES: List[ResourceCategory] = [
    ResourceCategory(
        name="ec2_instances",
        title="EC2 instances",
        service="ec2",
        operation="describe_instances",
        items="Reservations[].Instances[]",
        fields=(
            ("InstanceId", "InstanceId"),
            ("InstanceType", "InstanceType"),
            ("State", "State.Name"),
            ("Tags", "Tags"),
        ),
        count_field="InstanceId",
    ),
    ResourceCategory(
        name="security_groups",
        title="security groups",
        service="ec2",
        operation="describe_security_groups",
        items="SecurityGroups[]",
        fields=(
            ("GroupName", "GroupName"),
            ("GroupId", "GroupId"),
            ("Description", "Description"),
            ("VpcId", "VpcId"),
        ),
        count_field="GroupId",
    ),
    ResourceCategory(
        name="vpcs",
        title="VPCs",
        service="ec2",
        operation="describe_vpcs",
        items="Vpcs[]",
        fields=(
            ("VpcId", "VpcId"),
            ("CidrBlock", "CidrBlock"),
            ("IsDefault", "IsDefault"),
            ("State", "State"),
        ),
        count_field="VpcId",
    ),
    ResourceCategory(
        name="elastic_ips",
        title="elastic IPs",
        service="ec2",
        operation="describe_addresses",
        items="Addresses[]",
        fields=(
            ("PublicIp", "PublicIp"),
            ("InstanceId", "InstanceId"),
            ("AllocationId", "AllocationId"),
        ),
        count_field="AllocationId",
    ),
    ResourceCategory(
        name="ebs_volumes",
        title="EBS volumes",
        service="ec2",
        operation="describe_volumes",
        items="Volumes[]",
        fields=(
            ("VolumeId", "VolumeId"),
            ("Size", "Size"),
            ("State", "State"),
            ("AvailabilityZone", "AvailabilityZone"),
        ),
        count_field="VolumeId",
    ),
    ResourceCategory(
        name="rds_instances",
        title="RDS instances",
        service="rds",
        operation="describe_db_instances",
        items="DBInstances[]",
        fields=(
            ("DBInstanceIdentifier", "DBInstanceIdentifier"),
            ("DBInstanceClass", "DBInstanceClass"),
            ("Engine", "Engine"),
            ("DBInstanceStatus", "DBInstanceStatus"),
        ),
        count_field="DBInstanceIdentifier",
    ),
    ResourceCategory(
        name="s3_buckets",
        title="S3 buckets",
        service="s3",
        operation="list_buckets",
        items="Buckets[]",
        fields=(("Name", "Name"),),
        count_field="Name",
        is_global=True,
    ),
    ResourceCategory(
        name="iam_users",
        title="IAM users",
        service="iam",
        operation="list_users",
        items="Users[]",
        fields=(
            ("UserName", "UserName"),
            ("CreateDate", "CreateDate"),
        ),
        count_field="UserName",
        is_global=True,
    ),
    ResourceCategory(
        name="cloudfront_distributions",
        title="CloudFront distributions",
        service="cloudfront",
        operation="list_distributions",
        items="DistributionList.Items[]",
        fields=(
            ("Id", "Id"),
            ("DomainName", "DomainName"),
            ("Status", "Status"),
            ("Enabled", "Enabled"),
        ),
        count_field="Id",
        is_global=True,
    ),
]

_CATALOG: Dict[str, ResourceCategory] = {category.name: category for category in DEFAULT_CATEGORIES}


def category_names() -> List[str]:
    return [category.name for category in DEFAULT_CATEGORIES]


def get_category(name: str) -> ResourceCategory:
    """Look up a built-in category by name.

    Raises:
        UnknownCategoryError: If the name is not in the catalog
    """
    try:
        return _CATALOG[name]
    except KeyError:
        raise UnknownCategoryError(
            f"Unknown category '{name}'. Available categories: {', '.join(category_names())}"
        ) from None


def resolve_categories(names: Optional[Iterable[str]] = None) -> List[ResourceCategory]:
    """Resolve category names to catalog entries.

    Args:
        names: Category names in the order they should be audited; None or empty
            selects every built-in category in catalog order

    Returns:
        Categories in the requested order, duplicates removed
    """
    if not names:
        return list(DEFAULT_CATEGORIES)

    resolved: List[ResourceCategory] = []
    seen = set()
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        resolved.append(get_category(name))
    return resolved
