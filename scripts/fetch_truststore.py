#!/usr/bin/env python

"""Download the Amazon RDS global CA bundle into the package.

Run before building a distribution; the adapter injects this bundle as the
default trust store and refuses to connect without it.

Usage:
    uv run python scripts/fetch_truststore.py
    uv run python scripts/fetch_truststore.py --url https://truststore.pki.rds.amazonaws.com/eu-west-2/eu-west-2-bundle.pem
    uv run python scripts/fetch_truststore.py --help
"""

import logging
import urllib.request
from pathlib import Path

import typer

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = typer.Typer(help="Fetch the RDS CA bundle packaged with iam_dbauth")

GLOBAL_BUNDLE_URL = "https://truststore.pki.rds.amazonaws.com/global/global-bundle.pem"
DEFAULT_OUTPUT = Path(__file__).parent.parent / "iam_dbauth" / "certs" / "rds-global-bundle.pem"


@app.command()
def main(
    url: str = typer.Option(GLOBAL_BUNDLE_URL, help="CA bundle URL"),
    output: Path = typer.Option(DEFAULT_OUTPUT, help="Destination file"),
    timeout: float = typer.Option(30.0, help="Download timeout in seconds"),
) -> None:
    """Download the CA bundle and check it contains PEM certificates."""
    logger.info(f"Downloading {url}")
    with urllib.request.urlopen(url, timeout=timeout) as response:
        data = response.read()

    count = data.count(b"-----BEGIN CERTIFICATE-----")
    if count == 0:
        logger.error("Downloaded file contains no PEM certificates")
        raise typer.Exit(code=1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    logger.info(f"Wrote {count} certificates to {output}")


if __name__ == "__main__":
    app()
