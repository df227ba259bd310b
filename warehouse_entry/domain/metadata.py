"""
Resolution of the system-generated provenance fields.

`createdAt` and `createdBy` are filled once, when the widget is built, from an
ordered chain of optional sources. A source that raises or yields an empty
value hands over to the next one; the caller never sees an error and the last
resort is always an empty string.

Host identity (session object, stored bearer credential) is reached only
through an injected `IdentityLookup`, never through process globals.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Protocol, runtime_checkable

from warehouse_entry.utils.logging import get_logger

log = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_TOKEN_KEY = "qnotes_token"

# Label fields read from a session object or a credential payload, in order.
IDENTITY_LABEL_KEYS = ("full_name", "username")

LabelProvider = Callable[[], Any]


@runtime_checkable
class IdentityLookup(Protocol):
    """
    Best-effort access to the host's notion of "who is logged in".

    Both methods may raise; callers treat any failure as "no value".
    """

    def current_session(self) -> Any:
        """Return the host session object (mapping or attribute bag), or None."""
        ...

    def stored_credential(self) -> Optional[str]:
        """Return the bearer credential kept in persistent storage, or None."""
        ...


class HostIdentity:
    """
    `IdentityLookup` over plain host state: a session object and a
    key/value storage (e.g. a browser-storage mirror) holding the credential.
    """

    def __init__(
        self,
        session: Any = None,
        storage: Optional[Mapping[str, Any]] = None,
        token_key: str = DEFAULT_TOKEN_KEY,
    ) -> None:
        self.session = session
        self.storage = storage
        self.token_key = token_key

    def current_session(self) -> Any:
        return self.session

    def stored_credential(self) -> Optional[str]:
        if self.storage is None:
            return None
        token = self.storage.get(self.token_key)
        return token if isinstance(token, str) else None


def _clean(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""


def first_label(sources: Iterable[LabelProvider], chain: str = "label") -> str:
    """
    Return the first non-empty trimmed string produced by `sources`.

    Exceptions raised by a source are logged at DEBUG and skipped.
    """
    for index, source in enumerate(sources):
        try:
            label = _clean(source())
        except Exception:  # noqa: BLE001 - every source is optional
            log.debug("%s source %d failed, falling through", chain, index, exc_info=True)
            continue
        if label:
            return label
    return ""


def _label_from(obj: Any) -> str:
    """Read `full_name`, then `username`, from a mapping or an attribute bag."""
    if obj is None:
        return ""
    for key in IDENTITY_LABEL_KEYS:
        if isinstance(obj, Mapping):
            value = obj.get(key)
        else:
            value = getattr(obj, key, None)
        label = _clean(value)
        if label:
            return label
    return ""


def decode_credential_payload(token: Any) -> Optional[dict]:
    """
    Decode the middle segment of a dotted bearer credential as a JSON object.

    No signature is checked: the result is only good for display labels.
    Any deviation from the expected format yields None, including characters
    outside the base64url alphabet.
    """
    if not isinstance(token, str):
        return None
    parts = token.split(".")
    if len(parts) < 2 or not parts[1]:
        return None
    segment = parts[1]
    segment += "=" * (-len(segment) % 4)
    try:
        decoded = base64.b64decode(segment, altchars=b"-_", validate=True)
        payload = json.loads(decoded.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None
    return payload if isinstance(payload, dict) else None


def label_from_session(identity: Optional[IdentityLookup]) -> str:
    if identity is None:
        return ""
    return _label_from(identity.current_session())


def label_from_credential(identity: Optional[IdentityLookup]) -> str:
    if identity is None:
        return ""
    return _label_from(decode_credential_payload(identity.stored_credential()))


def format_timestamp(moment: datetime) -> str:
    """Format as `YYYY-MM-DD HH:MM:SS` with zero-padded components."""
    return moment.strftime(TIMESTAMP_FORMAT)


def resolve_created_at(
    existing: Any,
    clock_provider: Optional[LabelProvider] = None,
    *,
    clock: Callable[[], datetime] = datetime.now,
) -> str:
    """
    Return `existing` when it is a non-empty string, otherwise the injected
    "now" label, then local wall-clock time, then "".
    """
    if isinstance(existing, str) and existing:
        return existing

    sources = []
    if clock_provider is not None:
        sources.append(clock_provider)
    sources.append(lambda: format_timestamp(clock()))
    return first_label(sources, chain="createdAt")


def resolve_created_by(
    existing: Any,
    user_provider: Optional[LabelProvider] = None,
    session_lookup: Optional[IdentityLookup] = None,
    token_lookup: Optional[IdentityLookup] = None,
) -> str:
    """
    Return `existing` when it is a non-empty string, otherwise the first label
    from: injected user provider, session object, stored credential payload.

    `token_lookup` defaults to `session_lookup` so a single `IdentityLookup`
    covers both host sources.
    """
    if isinstance(existing, str) and existing:
        return existing

    if token_lookup is None:
        token_lookup = session_lookup

    sources = []
    if user_provider is not None:
        sources.append(user_provider)
    sources.append(lambda: label_from_session(session_lookup))
    sources.append(lambda: label_from_credential(token_lookup))
    return first_label(sources, chain="createdBy")


__all__ = [
    "DEFAULT_TOKEN_KEY",
    "HostIdentity",
    "IdentityLookup",
    "TIMESTAMP_FORMAT",
    "decode_credential_payload",
    "first_label",
    "format_timestamp",
    "resolve_created_at",
    "resolve_created_by",
]
