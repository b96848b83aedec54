"""boto3 session, client and credential helpers."""
