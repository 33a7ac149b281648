"""Error definitions for the IAM authentication adapter.

Every failure surfaces as a ConnectionFailed subclass. Collaborator errors are
chained as ``__cause__`` so the original message is never lost.
"""


class ConnectionFailed(Exception):
    """Base error for any connection attempt the adapter cannot complete."""


class NullDescriptor(ConnectionFailed):
    """No connection descriptor was supplied."""


class MalformedDescriptor(ConnectionFailed):
    """The descriptor does not match the expected grammar."""


class MissingIdentity(ConnectionFailed):
    """The database user or the AWS profile is absent after merging."""


class MissingHost(ConnectionFailed):
    """The descriptor does not name a database host."""


class MissingPort(ConnectionFailed):
    """No explicit port and no default port for the scheme."""


class RegionUnresolved(ConnectionFailed):
    """No signing region could be determined."""


class DelegateUnresolvable(ConnectionFailed):
    """No delegate driver identifier could be determined or it is unknown."""


class DelegateLoadFailed(ConnectionFailed):
    """A known delegate driver could not be instantiated."""


class CredentialResolutionFailed(ConnectionFailed):
    """The AWS profile did not yield usable credentials."""


class SigningFailed(ConnectionFailed):
    """Signing the authentication token failed."""


class TrustStoreMissing(ConnectionFailed):
    """The packaged CA bundle is missing, which indicates a packaging defect."""


class UnsupportedFeature(ConnectionFailed):
    """The operation needs a resolved delegate driver."""
