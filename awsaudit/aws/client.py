"""boto3 session and client creation."""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig

logger = logging.getLogger(__name__)

# Standard retry mode backs off on throttling.
DEFAULT_BOTO_CONFIG = BotoConfig(retries={"mode": "standard", "max_attempts": 3})


def create_session(profile: Optional[str] = None) -> boto3.Session:
    """Create a boto3 session for the given profile.

    A new session is created per call; boto3 sessions must not be shared
    between threads.

    Args:
        profile: AWS profile name (None uses the default credential chain)

    Returns:
        boto3 Session
    """
    return boto3.Session(profile_name=profile) if profile else boto3.Session()


def create_boto_client(
    service: str,
    region: Optional[str] = None,
    profile: Optional[str] = None,
    session: Optional[boto3.Session] = None,
) -> Any:
    """Create a boto3 client.

    Args:
        service: boto3 service name (e.g., "ec2")
        region: AWS region; omitted for global services
        profile: AWS profile name, used when no session is given
        session: Existing session to create the client from

    Returns:
        boto3 client for the service
    """
    session = session or create_session(profile)
    kwargs: dict = {"config": DEFAULT_BOTO_CONFIG}
    if region:
        kwargs["region_name"] = region
    logger.debug(f"Creating {service} client (region={region or 'global'}, profile={profile or 'default'})")
    return session.client(service, **kwargs)
