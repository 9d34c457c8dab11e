"""
Storage Codecs: Document <-> Backend Bytes
==========================================

A Codec is injected into a backend adapter; the merge engine only ever
sees Documents. Both codecs share one wire layout:

    [1-byte flags][payload]

    flags 0x00: payload is the raw encoding
    flags 0x01: payload is an LZ4 frame of the raw encoding

Payloads at or above the compression threshold are LZ4-compressed, the
same rule the session payload cache applies to context blobs.

Round-trip guarantee: deserialize(serialize(doc)) deep-equals doc for any
JSON-comparable Document (tuples come back as lists, which deep_equal
treats as equal).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import lz4.frame
import msgpack

from sessionmerge.core import constants as C
from sessionmerge.core.errors import DecodeError
from sessionmerge.core.types import Document, Err, Ok, Result

if TYPE_CHECKING:
    from sessionmerge.core.config import CodecConfig


@runtime_checkable
class Codec(Protocol):
    """Serializes Documents for a particular backend."""

    name: str

    def serialize(self, document: Document) -> Result[bytes, DecodeError]:
        ...

    def deserialize(self, data: bytes) -> Result[Any, DecodeError]:
        """Decode stored bytes. The value is not guaranteed to be a Document."""
        ...


class _FramedCodec:
    """Flag byte + optional LZ4 framing shared by the concrete codecs."""

    name = "framed"

    __slots__ = ("_compress", "_threshold")

    def __init__(
        self,
        compression_enabled: bool = True,
        compression_threshold_bytes: int = C.COMPRESSION_THRESHOLD_BYTES,
    ) -> None:
        self._compress = compression_enabled
        self._threshold = compression_threshold_bytes

    def _encode(self, document: Document) -> bytes:
        raise NotImplementedError

    def _decode(self, raw: bytes) -> Any:
        raise NotImplementedError

    def serialize(self, document: Document) -> Result[bytes, DecodeError]:
        try:
            raw = self._encode(document)
        except (TypeError, ValueError, OverflowError) as e:
            return Err(DecodeError.encode_failed(self.name, cause=e))

        if self._compress and len(raw) >= self._threshold:
            return Ok(bytes([C.FLAG_LZ4]) + lz4.frame.compress(raw))
        return Ok(bytes([C.FLAG_RAW]) + raw)

    def deserialize(self, data: bytes) -> Result[Any, DecodeError]:
        if not data:
            return Err(DecodeError.malformed(self.name))

        flags, payload = data[0], data[1:]
        try:
            if flags == C.FLAG_LZ4:
                payload = lz4.frame.decompress(payload)
            elif flags != C.FLAG_RAW:
                return Err(DecodeError.malformed(self.name).with_context(flags=flags))
            return Ok(self._decode(payload))
        except Exception as e:
            # lz4, json and msgpack each raise their own exception families
            return Err(DecodeError.malformed(self.name, cause=e))


class JsonCodec(_FramedCodec):
    """Compact UTF-8 JSON. NaN and Infinity are rejected."""

    name = "json"

    __slots__ = ()

    def _encode(self, document: Document) -> bytes:
        return json.dumps(
            document,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")

    def _decode(self, raw: bytes) -> Any:
        return json.loads(raw.decode("utf-8"))


class MsgpackCodec(_FramedCodec):
    """MessagePack with str/bin distinction preserved."""

    name = "msgpack"

    __slots__ = ()

    def _encode(self, document: Document) -> bytes:
        return msgpack.packb(document, use_bin_type=True)

    def _decode(self, raw: bytes) -> Any:
        return msgpack.unpackb(raw, raw=False)


def create_codec(config: "CodecConfig") -> Codec:
    """
    Build the codec named by configuration.

    Raises:
        ValueError: Unknown codec format (SessionMergeConfig.validate()
            reports this earlier as an Err).
    """
    codecs = {"json": JsonCodec, "msgpack": MsgpackCodec}
    try:
        codec_cls = codecs[config.format]
    except KeyError:
        raise ValueError(f"Unknown codec format '{config.format}'") from None
    return codec_cls(
        compression_enabled=config.compression_enabled,
        compression_threshold_bytes=config.compression_threshold_bytes,
    )
