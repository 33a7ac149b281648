"""Shared fixtures for adapter tests."""

from unittest.mock import MagicMock

import pytest
from botocore.credentials import Credentials

from iam_dbauth.adapter import IamAuthAdapter
from iam_dbauth.aws.region import RegionResolver
from iam_dbauth.aws.token import TokenSigner
from iam_dbauth.config import AdapterSettings
from iam_dbauth.delegates.registry import DelegateRegistry
from iam_dbauth.delegates.resolver import DelegateResolver
from tests.utils import RDS_HOST, SteppingClock


@pytest.fixture
def credentials():
    """Static, obviously fake AWS credentials."""
    return Credentials("AKIDEXAMPLE", "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY")


@pytest.fixture
def aws_session(credentials):
    """boto3 Session stand-in with credentials and no default region."""
    session = MagicMock()
    session.get_credentials.return_value = credentials
    session.region_name = None
    return session


@pytest.fixture
def session_factory(aws_session):
    return MagicMock(return_value=aws_session)


@pytest.fixture
def delegate():
    """Delegate driver stand-in returning a sentinel connection."""
    driver = MagicMock(name="delegate")
    driver.connect.return_value = "connection"
    driver.major_version.return_value = 1
    driver.minor_version.return_value = 4
    driver.compliant.return_value = True
    return driver


@pytest.fixture
def registry(delegate):
    return DelegateRegistry({"pymysql": lambda: delegate, "mariadb": lambda: delegate})


@pytest.fixture
def trust_store(tmp_path):
    path = tmp_path / "rds-global-bundle.pem"
    path.write_text("-----BEGIN CERTIFICATE-----\n-----END CERTIFICATE-----\n")
    return path


@pytest.fixture
def settings(trust_store):
    return AdapterSettings(trust_store_path=trust_store)


@pytest.fixture
def signer():
    """Token signer stand-in returning a fixed token."""
    token_signer = MagicMock(spec=TokenSigner)
    token_signer.generate_auth_token.return_value = f"{RDS_HOST}:3306/?Action=connect&X-Amz-Signature=abc"
    return token_signer


@pytest.fixture
def adapter(settings, registry, session_factory, signer):
    """Adapter wired to the fake delegate, session and signer."""
    return IamAuthAdapter(
        settings,
        delegate_resolver=DelegateResolver(registry),
        region_resolver=RegionResolver(session_factory),
        token_signer=signer,
        clock=SteppingClock(),
    )
