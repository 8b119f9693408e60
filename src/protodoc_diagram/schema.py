"""Schema documentation model — loads protoc-gen-doc JSON into plain records.

Only what the diagram pipeline needs is modelled with behaviour; enums and
services are carried along so callers can render the rest of a file's docs.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class RecordField:
    name: str
    type: str = ""
    long_type: str = ""
    full_type: str | None = None
    label: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecordField:
        full_type = data.get("fullType")
        return cls(
            name=str(data.get("name", "")),
            type=str(data.get("type", "")),
            long_type=str(data.get("longType", "")),
            full_type=full_type if isinstance(full_type, str) and full_type else None,
            label=str(data.get("label", "")),
            description=str(data.get("description", "")),
        )


@dataclass
class Record:
    """A message definition: the unit that becomes a diagram node."""

    full_name: str
    long_name: str = ""
    name: str = ""
    description: str = ""
    fields: list[RecordField] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.long_name or self.name or self.full_name

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        return cls(
            full_name=str(data.get("fullName", "")),
            long_name=str(data.get("longName", "")),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            fields=[RecordField.from_dict(f) for f in data.get("fields") or [] if isinstance(f, dict)],
        )


@dataclass
class EnumValue:
    name: str
    number: str = ""
    description: str = ""


@dataclass
class EnumDef:
    full_name: str
    long_name: str = ""
    description: str = ""
    values: list[EnumValue] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnumDef:
        return cls(
            full_name=str(data.get("fullName", "")),
            long_name=str(data.get("longName", "")),
            description=str(data.get("description", "")),
            values=[
                EnumValue(
                    name=str(v.get("name", "")),
                    number=str(v.get("number", "")),
                    description=str(v.get("description", "")),
                )
                for v in data.get("values") or []
                if isinstance(v, dict)
            ],
        )


@dataclass
class ServiceMethod:
    name: str
    request_full_type: str = ""
    response_full_type: str = ""
    request_streaming: bool = False
    response_streaming: bool = False
    description: str = ""


@dataclass
class Service:
    full_name: str
    name: str = ""
    description: str = ""
    methods: list[ServiceMethod] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Service:
        return cls(
            full_name=str(data.get("fullName", "")),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            methods=[
                ServiceMethod(
                    name=str(m.get("name", "")),
                    request_full_type=str(m.get("requestFullType", "")),
                    response_full_type=str(m.get("responseFullType", "")),
                    request_streaming=bool(m.get("requestStreaming", False)),
                    response_streaming=bool(m.get("responseStreaming", False)),
                    description=str(m.get("description", "")),
                )
                for m in data.get("methods") or []
                if isinstance(m, dict)
            ],
        )


@dataclass
class DocFile:
    """One documented schema file."""

    name: str
    package: str = ""
    description: str = ""
    messages: list[Record] = field(default_factory=list)
    enums: list[EnumDef] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocFile:
        return cls(
            name=str(data.get("name", "")),
            package=str(data.get("package", "")),
            description=str(data.get("description", "")),
            messages=[Record.from_dict(m) for m in data.get("messages") or [] if isinstance(m, dict)],
            enums=[EnumDef.from_dict(e) for e in data.get("enums") or [] if isinstance(e, dict)],
            services=[Service.from_dict(s) for s in data.get("services") or [] if isinstance(s, dict)],
        )


@dataclass
class Documentation:
    files: list[DocFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Documentation:
        if not isinstance(data, dict):
            raise ValueError("documentation root must be a JSON object")
        files = data.get("files") or []
        if not isinstance(files, list):
            raise ValueError("'files' must be a list")
        return cls(files=[DocFile.from_dict(f) for f in files if isinstance(f, dict)])

    def file(self, name: str) -> DocFile:
        for doc_file in self.files:
            if doc_file.name == name:
                return doc_file
        raise ValueError(f"No file named '{name}' in documentation")


def parse_documentation(text: str) -> Documentation:
    """Parse a protoc-gen-doc JSON string."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}") from e
    doc = Documentation.from_dict(data)
    logger.debug("Loaded documentation with %d file(s)", len(doc.files))
    return doc


def load_documentation(path: str | Path) -> Documentation:
    """Read and parse a protoc-gen-doc JSON file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"cannot read '{path}': {e}") from e
    try:
        return parse_documentation(text)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
