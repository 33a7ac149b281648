"""Property merging across caller properties, query string and inline credentials.

Precedence, lowest to highest:
1. Properties supplied by the caller
2. Query-string parameters of the descriptor
3. Inline ``user:secret`` credentials of the descriptor
"""

from collections.abc import Mapping
from urllib.parse import unquote

from iam_dbauth.config import PropertyKeys

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


def url_decode(value: str) -> str:
    """Percent-decode a query component, keeping ``+`` literal.

    Form decoding turns ``+`` into a space, but AWS secret keys and profile
    names may contain ``+``. Only ``%2B`` decodes to ``+``.
    """
    return unquote(value.replace("+", "%2B"))


def parse_query_string(query: str | None) -> dict[str, str]:
    """Parse ``key=value&...`` into an ordered mapping.

    Pairs without ``=`` are ignored; a repeated key keeps its last value.
    """
    if not query:
        return {}
    params: dict[str, str] = {}
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        if not sep:
            continue
        params[url_decode(key)] = url_decode(value)
    return params


def parse_user_info(user_info: str | None) -> dict[str, str]:
    """Map an inline ``user:secret`` pair to ``user``/``password``.

    Trailing empty parts are dropped first, so ``user:`` and ``:`` carry no
    credentials and the lower-precedence sources still apply. Anything other
    than exactly two parts yields an empty mapping so that the missing
    identity is reported later rather than here.
    """
    if not user_info:
        return {}
    parts = user_info.split(":")
    while parts and not parts[-1]:
        parts.pop()
    if len(parts) != 2:
        return {}
    return {
        PropertyKeys.USER: unquote(parts[0]),
        PropertyKeys.PASSWORD: unquote(parts[1]),
    }


def merge_properties(
    properties: Mapping[str, object] | None,
    query_properties: Mapping[str, str] | None = None,
    user_info_properties: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge the three property sources into one string mapping.

    Query parameters override caller properties, in line with most DB-API
    drivers, and inline credentials override both.
    """
    merged: dict[str, str] = {}
    for key, value in (properties or {}).items():
        if value is not None:
            merged[str(key)] = str(value)
    merged.update(query_properties or {})
    merged.update(user_info_properties or {})
    return merged


def is_truthy(value: str | None) -> bool:
    return value is not None and value.strip().lower() in TRUE_VALUES
