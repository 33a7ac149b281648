"""Profile-scoped boto3 sessions used for credential and region lookup."""

import logging
from collections.abc import Callable

import boto3

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str], boto3.Session]


def profile_session(profile: str) -> boto3.Session:
    """Create a boto3 session bound to a named AWS profile.

    The session resolves credentials and the default region through the
    standard botocore provider chains (environment, shared config and
    credentials files, SSO, container and instance metadata).

    Raises:
        botocore.exceptions.ProfileNotFound: If the profile is not configured
    """
    logger.debug(f"Creating boto3 session for profile {profile}")
    return boto3.Session(profile_name=profile)
