"""Signing region resolution."""

import logging
import re
from collections.abc import Mapping

from botocore.exceptions import BotoCoreError

from iam_dbauth.aws.session import SessionFactory, profile_session
from iam_dbauth.config import PropertyKeys
from iam_dbauth.errors import RegionUnresolved

logger = logging.getLogger(__name__)

# Region segment right before the RDS domain, e.g. mydb.abc123.eu-west-1.rds.amazonaws.com
REGION_FROM_HOST = re.compile(r"\.([a-z0-9-]+)\.rds\.amazonaws\.com$")


def region_from_host(host: str | None) -> str | None:
    """Extract the region from an RDS endpoint host name, if it is one."""
    if not host:
        return None
    match = REGION_FROM_HOST.search(host)
    return match.group(1) if match else None


class RegionResolver:
    """Determines the region tokens are signed for.

    Resolution order, first match wins:
    1. ``aws_region`` property
    2. Region segment of an RDS endpoint host name
    3. Default region of the AWS profile
    """

    def __init__(self, session_factory: SessionFactory = profile_session):
        self._session_factory = session_factory

    def resolve(self, properties: Mapping[str, str], host: str | None, profile: str) -> str:
        """Resolve the signing region.

        Args:
            properties: Merged connection properties
            host: Database host from the descriptor
            profile: AWS profile the token is signed with

        Returns:
            Region identifier, e.g. "eu-west-1"

        Raises:
            RegionUnresolved: If no tier yields a region
        """
        explicit = properties.get(PropertyKeys.AWS_REGION)
        if explicit:
            return explicit

        from_host = region_from_host(host)
        if from_host:
            return from_host

        from_profile = self._profile_region(profile)
        if from_profile:
            return from_profile

        msg = (
            f"AWS region couldn't be automatically determined. Please define "
            f"`{PropertyKeys.AWS_REGION}` in query string or property, "
            f"or set a default region in the AWS profile."
        )
        raise RegionUnresolved(msg)

    def _profile_region(self, profile: str) -> str | None:
        try:
            return self._session_factory(profile).region_name
        except BotoCoreError as e:
            # Falls through to RegionUnresolved
            logger.debug(f"Default region lookup failed for profile {profile}: {e}")
            return None
