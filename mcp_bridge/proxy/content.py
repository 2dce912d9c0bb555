"""Classification and decoding of tool result content.

A tool result's ``content`` array may mix structured JSON, XML, CSV, inline
base64 images and plain text. `classify` groups the elements into
`ResultBuckets`; `decode` then picks the best source for the shape the caller
asked for.

Classification rules:
- a MIME type starting with ``image/`` wins regardless of the element type
  (legacy producers send images as ``data``); without a payload the element
  is kept in ``others``
- ``data`` (alias ``jsondata``) is routed by MIME type: XML and CSV to their
  buckets, JSON and anything unrecognized to ``json``
- an element without type goes to ``json`` when it carries data, to ``text``
  when it carries text
- ``text`` goes to ``text``; resources and unknown types go to ``others``
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ValidationError

from mcp_bridge.errors import DecodeError, RemoteToolError
from mcp_bridge.schemas.core import CallToolResult, ContentElement, ContentKind

logger = logging.getLogger(__name__)

IMAGE_MIME_PREFIX = "image/"
JSON_MIME_TYPES = frozenset({"", "application/json"})
XML_MIME_TYPES = frozenset({"application/xml", "text/xml"})
CSV_MIME_TYPES = frozenset({"text/csv"})


class DestinationShape(str, Enum):
    """Shape a caller wants a tool result decoded into."""

    OPAQUE = "opaque"
    TEXT = "text"
    BINARY = "binary"
    STRUCTURED = "structured"


@dataclass
class ResultBuckets:
    json: List[str] = field(default_factory=list)
    xml: List[str] = field(default_factory=list)
    csv: List[str] = field(default_factory=list)
    text: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    others: List[ContentElement] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.json or self.xml or self.csv or self.text or self.images or self.others)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "json": list(self.json),
            "xml": list(self.xml),
            "csv": list(self.csv),
            "text": list(self.text),
            "images": list(self.images),
            "others": [o.to_wire() for o in self.others],
        }


def classify(elements: Sequence[ContentElement]) -> ResultBuckets:
    buckets = ResultBuckets()
    for element in elements:
        mime = element.mime
        if mime.startswith(IMAGE_MIME_PREFIX):
            payload = element.payload()
            if payload:
                buckets.images.append(payload)
            else:
                buckets.others.append(element)
            continue

        kind = element.kind
        if kind is ContentKind.EMPTY:
            if element.data is not None and element.payload():
                buckets.json.append(element.payload())
            elif element.text:
                buckets.text.append(element.text)
            else:
                buckets.others.append(element)
        elif kind is ContentKind.DATA:
            payload = element.payload()
            if mime in XML_MIME_TYPES:
                buckets.xml.append(payload)
            elif mime in CSV_MIME_TYPES:
                buckets.csv.append(payload)
            else:
                if mime not in JSON_MIME_TYPES:
                    logger.debug("classify: routing unrecognized MIME type %r to json", mime)
                buckets.json.append(payload)
        elif kind is ContentKind.TEXT:
            buckets.text.append(element.text or "")
        elif kind in (ContentKind.RESOURCE, ContentKind.IMAGE, ContentKind.OTHER):
            buckets.others.append(element)
        else:  # pragma: no cover - ContentKind is closed
            raise AssertionError(f"unhandled content kind {kind!r}")
    return buckets


def decode(buckets: ResultBuckets, shape: DestinationShape = DestinationShape.OPAQUE, model: Optional[Type[BaseModel]] = None) -> Any:
    """Decode classified content into ``shape``.

    Args:
        buckets: Output of `classify`.
        shape: Requested destination shape.
        model: Optional pydantic model the structured payload is validated
            into (``STRUCTURED`` only).

    Raises:
        DecodeError: If no bucket can produce the requested shape, or the
            selected payload cannot be parsed.
    """
    if shape is DestinationShape.OPAQUE:
        if buckets.json:
            return _parse_json(buckets.json[0])
        if buckets.images:
            return buckets.images[0]
        if buckets.text:
            return "".join(buckets.text)
        return buckets.as_dict()

    if shape is DestinationShape.TEXT:
        for source in (buckets.text, buckets.json):
            if source:
                return "".join(source)
        if buckets.images:
            return buckets.images[0]
        for source in (buckets.xml, buckets.csv):
            if source:
                return "".join(source)
        return ""

    if shape is DestinationShape.BINARY:
        if buckets.images:
            try:
                return base64.b64decode("".join(buckets.images[0].split()), validate=True)
            except (binascii.Error, ValueError) as exc:
                raise DecodeError(f"invalid base64 image: {exc}") from exc
        for source in (buckets.json, buckets.xml, buckets.csv):
            if source:
                return source[0].encode("utf-8")
        raise DecodeError("no binary-compatible payload")

    if shape is DestinationShape.STRUCTURED:
        if buckets.json:
            raw = buckets.json[0]
        elif buckets.text:
            raw = buckets.text[0]
        else:
            raise DecodeError("no structured payload")
        return _validate(_parse_json(raw), model)

    raise DecodeError(f"unsupported destination shape {shape!r}")  # pragma: no cover


def decode_structured(value: Any, shape: DestinationShape = DestinationShape.OPAQUE, model: Optional[Type[BaseModel]] = None) -> Any:
    """Decode a result's ``structuredContent`` into ``shape``."""
    if shape is DestinationShape.TEXT:
        return value if isinstance(value, str) else json.dumps(value)
    if shape is DestinationShape.BINARY:
        raw = value if isinstance(value, str) else json.dumps(value)
        return raw.encode("utf-8")
    if shape is DestinationShape.STRUCTURED:
        return _validate(value, model)
    return value


def tool_error(result: CallToolResult, tool_name: str) -> RemoteToolError:
    """Build the error for a result flagged with ``isError``.

    The message is the first element's text, else the JSON dump of that
    element, else a fixed message when the result has no content.
    """
    if not result.content:
        return RemoteToolError(tool_name, "tool returned error without content")
    first = result.content[0]
    if first.text:
        return RemoteToolError(tool_name, first.text)
    return RemoteToolError(tool_name, json.dumps(first.to_wire()))


def _parse_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"invalid JSON payload: {exc}") from exc


def _validate(value: Any, model: Optional[Type[BaseModel]]) -> Any:
    if model is None:
        return value
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise DecodeError(f"payload does not match {model.__name__}: {exc}") from exc
