"""Two-pass webhook parsing into an :class:`EventEnvelope`.

The installation id and the payload are decoded independently from the same
raw document. The id is best effort: a delivery without
``installation.id`` (or with a malformed one) still parses, with an id of
``0``. The payload decode is strict: malformed JSON raises
:class:`~octogate.errors.PayloadDecodeError` and a document that fits no
known shape raises :class:`~octogate.errors.UnknownEventError`.

Example:
>>> envelope = parse_webhook(b'{"zen": "Keep it logically awesome.", "hook_id": 1}')
>>> envelope.event_name
'ping'
>>> envelope.installation_id
0

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import msgspec

from octogate.errors import PayloadDecodeError, UnknownEventError

from .payloads import WebhookPayload
from .taxonomy import Event, candidate_types, event_name_for, payload_type_for

if typ.TYPE_CHECKING:
    from octogate.github.client import GitHubClient
    from octogate.github.installations import InstallationResolver

PayloadT = typ.TypeVar("PayloadT", bound=WebhookPayload)


class _InstallationIdField(msgspec.Struct):
    id: int


class _InstallationIdDocument(msgspec.Struct):
    installation: _InstallationIdField | None = None


_installation_id_decoder = msgspec.json.Decoder(_InstallationIdDocument)
_document_decoder = msgspec.json.Decoder()


@dc.dataclass(frozen=True, slots=True)
class EventEnvelope(typ.Generic[PayloadT]):
    """A decoded webhook payload paired with its installation id.

    Attributes
    ----------
    payload
        The decoded payload.
    installation_id
        Installation that the delivery belongs to, or ``0`` when the
        document carried none.
    delivery_id
        ``X-GitHub-Delivery`` value when the transport supplied it.

    """

    payload: PayloadT
    installation_id: int = 0
    delivery_id: str | None = None

    @property
    def has_installation(self) -> bool:
        """Return whether the delivery named an installation."""
        return self.installation_id != 0

    @property
    def event_name(self) -> str:
        """Return the GitHub event name of the decoded payload."""
        return event_name_for(type(self.payload))

    def into_inner(self) -> PayloadT:
        """Return the payload, discarding the envelope."""
        return self.payload

    def to_json(self) -> bytes:
        """Return the payload re-encoded as JSON."""
        return msgspec.json.encode(self.payload)

    async def installation_client(
        self, resolver: InstallationResolver
    ) -> GitHubClient:
        """Return a GitHub client scoped to this delivery's installation.

        Raises
        ------
        InstallationError
            If the delivery carried no installation id or the token exchange
            fails.

        """
        return await resolver.client_for_installation(self.installation_id)


def extract_installation_id(raw: bytes | str) -> int:
    """Return ``installation.id`` from a raw document, or ``0``.

    Never raises: absent fields, wrong types and malformed JSON all yield
    ``0``.
    """
    try:
        document = _installation_id_decoder.decode(raw)
    except msgspec.DecodeError:
        return 0
    if document.installation is None:
        return 0
    return max(document.installation.id, 0)


def _decode_document(raw: bytes | str) -> object:
    try:
        return _document_decoder.decode(raw)
    except msgspec.DecodeError as exc:
        msg = f"Webhook body is not valid JSON: {exc}"
        raise PayloadDecodeError(msg) from exc


def _convert_as(document: object, payload_type: type[PayloadT]) -> PayloadT:
    try:
        return msgspec.convert(document, payload_type)
    except msgspec.ValidationError as exc:
        raise UnknownEventError.for_event(
            event_name_for(payload_type), str(exc)
        ) from exc


def _trial_decode(
    document: object, candidates: tuple[type[WebhookPayload], ...]
) -> WebhookPayload:
    for candidate in candidates:
        try:
            return msgspec.convert(document, candidate)
        except msgspec.ValidationError:
            continue
    raise UnknownEventError.no_match()


def decode_payload(
    raw: bytes | str,
    payload_type: object = Event,
    *,
    event_name: str | None = None,
) -> WebhookPayload:
    """Decode a webhook body into the payload shape it matches.

    Parameters
    ----------
    raw
        Webhook body as bytes or text.
    payload_type
        A single payload class, or a union of payload classes to choose
        from. Defaults to every known event.
    event_name
        ``X-GitHub-Event`` header value. When it names one of the candidate
        shapes, only that shape is tried.

    Raises
    ------
    PayloadDecodeError
        If ``raw`` is not valid JSON.
    UnknownEventError
        If the document matches none of the candidate shapes.

    """
    candidates = candidate_types(payload_type)
    document = _decode_document(raw)

    if len(candidates) == 1:
        return _convert_as(document, candidates[0])

    if event_name is not None:
        hinted = payload_type_for(event_name)
        if hinted is not None and hinted in candidates:
            return _convert_as(document, hinted)

    return _trial_decode(document, candidates)


@typ.overload
def parse_webhook(
    raw: bytes | str,
    payload_type: type[PayloadT],
    *,
    event_name: str | None = None,
    delivery_id: str | None = None,
) -> EventEnvelope[PayloadT]: ...


@typ.overload
def parse_webhook(
    raw: bytes | str,
    payload_type: object = ...,
    *,
    event_name: str | None = None,
    delivery_id: str | None = None,
) -> EventEnvelope[WebhookPayload]: ...


def parse_webhook(
    raw: bytes | str,
    payload_type: object = Event,
    *,
    event_name: str | None = None,
    delivery_id: str | None = None,
) -> EventEnvelope[typ.Any]:
    """Parse a webhook body into an envelope.

    The installation id is read first with a narrow, non-failing decode;
    the payload is then decoded by :func:`decode_payload`.

    Parameters
    ----------
    raw
        Webhook body as bytes or text.
    payload_type
        A payload class or union of payload classes. Defaults to
        :data:`~octogate.events.taxonomy.Event`.
    event_name
        Optional ``X-GitHub-Event`` header value used to select the shape.
    delivery_id
        Optional ``X-GitHub-Delivery`` header value, carried on the envelope.

    Returns
    -------
    EventEnvelope
        The decoded payload and its installation id.

    Raises
    ------
    PayloadDecodeError
        If ``raw`` is not valid JSON.
    UnknownEventError
        If the document matches no candidate shape.

    """
    installation_id = extract_installation_id(raw)
    payload = decode_payload(raw, payload_type, event_name=event_name)
    return EventEnvelope(
        payload=payload,
        installation_id=installation_id,
        delivery_id=delivery_id,
    )


__all__ = [
    "EventEnvelope",
    "decode_payload",
    "extract_installation_id",
    "parse_webhook",
]
