"""Unit tests for secret redaction in logs."""

import logging

from iam_dbauth.common.log_utils import (
    REDACTED,
    SecretRedactingFilter,
    redact_properties,
    redact_token,
)

TOKEN = (
    "mydb.eu-west-1.rds.amazonaws.com:3306/?Action=connect&DBUser=app_user"
    "&X-Amz-Security-Token=FwoGZXIvYXdzEXAMPLE&X-Amz-Signature=0123abcd"
)


class TestRedactToken:
    def test_masks_signature_material(self):
        redacted = redact_token(TOKEN)

        assert "0123abcd" not in redacted
        assert "FwoGZXIvYXdzEXAMPLE" not in redacted
        assert f"X-Amz-Signature={REDACTED}" in redacted
        assert "DBUser=app_user" in redacted

    def test_leaves_plain_text(self):
        assert redact_token("Connecting to mydb") == "Connecting to mydb"


class TestRedactProperties:
    def test_hides_password(self):
        properties = {"user": "app_user", "password": TOKEN}

        assert redact_properties(properties) == {"user": "app_user", "password": REDACTED}
        assert properties["password"] == TOKEN


class TestSecretRedactingFilter:
    def test_masks_formatted_message(self):
        record = logging.LogRecord("pymysql", logging.ERROR, __file__, 1, "Failed with %s", (TOKEN,), None)

        assert SecretRedactingFilter().filter(record) is True
        assert "0123abcd" not in record.getMessage()

    def test_keeps_args_when_nothing_to_mask(self):
        record = logging.LogRecord("pymysql", logging.INFO, __file__, 1, "Connected to %s", ("mydb",), None)

        SecretRedactingFilter().filter(record)

        assert record.args == ("mydb",)
        assert record.getMessage() == "Connected to mydb"
