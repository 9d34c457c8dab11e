"""
Boundary Formats: Host Blob <-> Document

The host hands Write an encoded blob and expects one back from Read. The
format belongs to the host; the engine only ever handles Documents, so
translation happens here and nowhere else.
"""

from __future__ import annotations

import json
from typing import Protocol, Union, runtime_checkable

from sessionmerge.core.errors import DecodeError
from sessionmerge.core.types import Document, Err, Ok, Result, is_document


@runtime_checkable
class BoundaryFormat(Protocol):
    def encode(self, document: Document) -> Result[str, DecodeError]:
        ...

    def decode(self, data: Union[str, bytes]) -> Result[Document, DecodeError]:
        ...


class JsonBoundaryFormat:
    """
    JSON object text. An empty blob decodes to an empty session, which is
    what hosts send for a brand new session.
    """

    name = "json"

    def encode(self, document: Document) -> Result[str, DecodeError]:
        try:
            return Ok(json.dumps(document, separators=(",", ":"), ensure_ascii=False))
        except (TypeError, ValueError) as e:
            return Err(DecodeError.encode_failed("host json", cause=e))

    def decode(self, data: Union[str, bytes]) -> Result[Document, DecodeError]:
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as e:
                return Err(DecodeError.malformed("host json", cause=e))

        if not data.strip():
            return Ok({})

        try:
            value = json.loads(data)
        except json.JSONDecodeError as e:
            return Err(DecodeError.malformed("host json", cause=e))

        if not is_document(value):
            return Err(DecodeError.not_a_document("host json", type(value).__name__))
        return Ok(value)
