"""AWS credential validation."""

from __future__ import annotations

from typing import Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .client import create_boto_client


class CredentialValidationError(Exception):
    """Raised when AWS credentials cannot be resolved or are rejected."""


def validate_credentials(profile: Optional[str] = None, region: Optional[str] = None) -> Dict[str, str]:
    """Resolve the caller identity for a profile.

    Args:
        profile: AWS profile name
        region: Region for the STS endpoint

    Returns:
        Dictionary with account_id, arn and user_id

    Raises:
        CredentialValidationError: If credentials are missing, expired or invalid
    """
    try:
        sts = create_boto_client("sts", region=region, profile=profile)
        identity = sts.get_caller_identity()
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        raise CredentialValidationError(f"AWS rejected the credentials ({error_code}): {e}") from e
    except BotoCoreError as e:
        raise CredentialValidationError(f"Could not resolve AWS credentials: {e}") from e

    return {
        "account_id": identity["Account"],
        "arn": identity["Arn"],
        "user_id": identity["UserId"],
    }
