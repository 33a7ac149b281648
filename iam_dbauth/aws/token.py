"""RDS IAM authentication token generation.

A token is a SigV4 presigned ``GET https://<host>:<port>/?Action=connect&DBUser=<user>``
request, scoped to the ``rds-db`` service, with the scheme removed. The database
server validates the signature; the token is never inspected locally.
"""

import logging
from datetime import UTC

from botocore.auth import SIGV4_TIMESTAMP, SigV4QueryAuth
from botocore.awsrequest import AWSRequest
from botocore.credentials import ReadOnlyCredentials
from botocore.exceptions import BotoCoreError, ClientError

from iam_dbauth.aws.session import SessionFactory, profile_session
from iam_dbauth.config import CONSTANTS
from iam_dbauth.errors import CredentialResolutionFailed, SigningFailed
from iam_dbauth.models.descriptor import SigningContext

logger = logging.getLogger(__name__)

DEFAULT_SIGNING_NAME = "rds-db"


class PresignAuth(SigV4QueryAuth):
    """SigV4 query signer pinned to a given issuance time.

    botocore stamps requests with the current time; pinning it to the
    signing context keeps the token consistent with ``issued_at``.
    """

    def __init__(self, credentials, service_name, region_name, expires, timestamp):
        super().__init__(credentials, service_name, region_name, expires=expires)
        self._timestamp = timestamp

    def add_auth(self, request):
        request.context["timestamp"] = self._timestamp
        self._modify_request_before_signing(request)
        canonical_request = self.canonical_request(request)
        string_to_sign = self.string_to_sign(request, canonical_request)
        signature = self.signature(string_to_sign, request)
        self._inject_signature_to_request(request, signature)


class TokenSigner:
    """Signs short-lived RDS authentication tokens with profile credentials."""

    def __init__(
        self,
        session_factory: SessionFactory = profile_session,
        signing_name: str = DEFAULT_SIGNING_NAME,
    ):
        self._session_factory = session_factory
        self.signing_name = signing_name

    def resolve_credentials(self, profile: str) -> ReadOnlyCredentials:
        """Resolve a frozen set of credentials for an AWS profile.

        Assume-role and SSO profiles fetch their credentials lazily, so STS
        failures surface while freezing them.

        Raises:
            CredentialResolutionFailed: If the profile is unknown, yields no
                credentials or the credential provider call fails
        """
        try:
            credentials = self._session_factory(profile).get_credentials()
            if credentials is None:
                msg = f"No AWS credentials found for profile {profile}"
                raise CredentialResolutionFailed(msg)
            return credentials.get_frozen_credentials()
        except (BotoCoreError, ClientError) as e:
            raise CredentialResolutionFailed(
                f"Unable to resolve AWS credentials for profile {profile}: {e}"
            ) from e

    def generate_auth_token(self, context: SigningContext) -> str:
        """Generate an authentication token usable as the database password.

        Args:
            context: Host, port, user, region, profile and validity window

        Returns:
            Token of the form ``host:port/?Action=connect&DBUser=...&X-Amz-Signature=...``

        Raises:
            CredentialResolutionFailed: If the profile yields no credentials
            SigningFailed: If signing the request fails
        """
        credentials = self.resolve_credentials(context.profile)

        try:
            request = AWSRequest(
                method="GET",
                url=f"{CONSTANTS.SIGNING_SCHEME}{context.host}:{context.port}/",
                params={"Action": CONSTANTS.CONNECT_ACTION, "DBUser": context.user},
            )
            signer = PresignAuth(
                credentials,
                self.signing_name,
                context.region,
                expires=context.expires_in,
                timestamp=context.issued_at.astimezone(UTC).strftime(SIGV4_TIMESTAMP),
            )
            signer.add_auth(request)
        except Exception as e:
            raise SigningFailed(f"Unable to sign RDS auth token: {e}") from e

        logger.debug(
            f"Generated RDS auth token for {context.user}@{context.host}:{context.port} "
            f"valid until {context.expires_at.isoformat()}"
        )
        return request.url[len(CONSTANTS.SIGNING_SCHEME) :]
