# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gamebarfix/registry/regfile.py
"""
Reader/writer for the .reg text format produced by `reg export`.

Backup fragments are written by reg.exe; this module lets us look inside them
(value pruning on restore, `--mode list`) without touching the live registry.

Supported:
- "Windows Registry Editor Version 5.00" and "REGEDIT4" headers
- [key] and [-key] sections
- @= / "name"= entries: strings, dword:, hex:, hex(N):, and "name"=- deletions
- backslash line continuations for hex data
- UTF-16 (with BOM, as reg.exe writes) and UTF-8 input
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.exceptions import RegFileError
from .paths import RegValue

HEADER = "Windows Registry Editor Version 5.00"
_HEADERS = (HEADER, "REGEDIT4")

# Registry type ids as they appear in hex(N): encodings
_KIND_BY_ID = {
    0: "REG_NONE",
    1: "REG_SZ",
    2: "REG_EXPAND_SZ",
    3: "REG_BINARY",
    4: "REG_DWORD",
    7: "REG_MULTI_SZ",
    11: "REG_QWORD",
}
_ID_BY_KIND = {v: k for k, v in _KIND_BY_ID.items()}

_HEX_BYTES_PER_LINE = 25

_NAMED_RE = re.compile(r'^"((?:[^"\\]|\\.)*)"\s*=(.*)$')
_DEFAULT_RE = re.compile(r"^@\s*=(.*)$")
_STRING_RE = re.compile(r'^"((?:[^"\\]|\\.)*)"$')
_HEX_RE = re.compile(r"^hex(?:\(([0-9a-fA-F]+)\))?:(.*)$", re.DOTALL)
_HEX_START_RE = re.compile(r'=\s*hex(\([0-9a-fA-F]+\))?:')


@dataclass
class RegKey:
    path: str
    values: Dict[str, RegValue] = field(default_factory=dict)
    deleted_values: List[str] = field(default_factory=list)
    delete: bool = False

    def get(self, name: str) -> Optional[RegValue]:
        want = name.lower()
        for k, v in self.values.items():
            if k.lower() == want:
                return v
        return None

    def has_value(self, name: str) -> bool:
        return self.get(name) is not None


@dataclass
class RegDocument:
    keys: List[RegKey] = field(default_factory=list)

    def find(self, path: str) -> Optional[RegKey]:
        want = _norm_path(path)
        for k in self.keys:
            if _norm_path(k.path) == want:
                return k
        return None


def _norm_path(p: str) -> str:
    return p.strip().strip("\\").lower()


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _decode_bytes(raw: bytes) -> str:
    if raw.startswith(b"\xff\xfe"):
        return raw[2:].decode("utf-16-le")
    if raw.startswith(b"\xfe\xff"):
        return raw[2:].decode("utf-16-be")
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw[3:].decode("utf-8")
    # BOM-less UTF-16 still shows NUL high bytes in the ASCII header
    if len(raw) >= 2 and raw[1:2] == b"\x00":
        return raw.decode("utf-16-le")
    return raw.decode("utf-8")


def _unescape(s: str) -> str:
    return re.sub(r"\\(.)", r"\1", s)


def _escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')


def _decode_sz(raw: bytes) -> str:
    return raw.decode("utf-16-le", errors="replace").split("\x00", 1)[0]


def _decode_multi_sz(raw: bytes) -> List[str]:
    items = raw.decode("utf-16-le", errors="replace").split("\x00")
    while items and items[-1] == "":
        items.pop()
    return items


def _parse_hex_bytes(body: str, lineno: int) -> bytes:
    body = body.replace("\\", "").replace(" ", "").replace("\t", "").strip().rstrip(",")
    if not body:
        return b""
    try:
        return bytes(int(b, 16) for b in body.split(","))
    except ValueError as e:
        raise RegFileError(msg=f"line {lineno}: bad hex data: {e}") from e


def _parse_value(text: str, lineno: int) -> Optional[RegValue]:
    """Return None for the `-` (delete value) form."""
    text = text.strip()
    if text == "-":
        return None

    m = _STRING_RE.match(text)
    if m:
        return RegValue("REG_SZ", _unescape(m.group(1)))

    if text.lower().startswith("dword:"):
        try:
            return RegValue("REG_DWORD", int(text[6:].strip(), 16))
        except ValueError as e:
            raise RegFileError(msg=f"line {lineno}: bad dword: {text!r}") from e

    m = _HEX_RE.match(text)
    if m:
        type_id = int(m.group(1), 16) if m.group(1) is not None else 3
        raw = _parse_hex_bytes(m.group(2), lineno)
        kind = _KIND_BY_ID.get(type_id, f"REG_TYPE_{type_id}")
        if kind in ("REG_SZ", "REG_EXPAND_SZ"):
            return RegValue(kind, _decode_sz(raw))
        if kind == "REG_MULTI_SZ":
            return RegValue(kind, _decode_multi_sz(raw))
        if kind in ("REG_DWORD", "REG_QWORD"):
            return RegValue(kind, int.from_bytes(raw, "little"))
        return RegValue(kind, raw)

    raise RegFileError(msg=f"line {lineno}: unrecognized value: {text[:60]!r}")


def _logical_lines(text: str):
    """Yield (lineno, line) with hex continuations joined."""
    buf: Optional[str] = None
    start = 0
    for i, line in enumerate(text.splitlines(), start=1):
        line = line.rstrip()
        if buf is not None:
            buf += line.strip()
            if not line.endswith("\\"):
                yield start, buf
                buf = None
            continue
        if line.endswith("\\") and _HEX_START_RE.search(line):
            buf, start = line, i
            continue
        yield i, line
    if buf is not None:
        yield start, buf


def parse_reg_text(text: str) -> RegDocument:
    doc = RegDocument()
    cur: Optional[RegKey] = None
    saw_header = False

    for lineno, line in _logical_lines(text.lstrip("\ufeff")):
        stripped = line.strip()
        if not stripped or stripped.startswith(";"):
            continue

        if not saw_header:
            if stripped not in _HEADERS:
                raise RegFileError(msg=f"line {lineno}: missing .reg header, got {stripped[:60]!r}")
            saw_header = True
            continue

        if stripped.startswith("[") and stripped.endswith("]"):
            inner = stripped[1:-1]
            delete = inner.startswith("-")
            cur = RegKey(path=inner[1:] if delete else inner, delete=delete)
            doc.keys.append(cur)
            continue

        if cur is None:
            raise RegFileError(msg=f"line {lineno}: value outside of any [key] section")

        m = _DEFAULT_RE.match(stripped)
        if m:
            name, rest = "", m.group(1)
        else:
            m = _NAMED_RE.match(stripped)
            if not m:
                raise RegFileError(msg=f"line {lineno}: cannot parse entry {stripped[:60]!r}")
            name, rest = _unescape(m.group(1)), m.group(2)

        value = _parse_value(rest, lineno)
        if value is None:
            cur.deleted_values.append(name)
        else:
            cur.values[name] = value

    if not saw_header:
        raise RegFileError(msg="empty .reg document")
    return doc


def load_reg_file(path: Union[str, Path]) -> RegDocument:
    p = Path(path)
    try:
        text = _decode_bytes(p.read_bytes())
    except UnicodeDecodeError as e:
        raise RegFileError(msg=f"{p}: undecodable .reg file", cause=e) from e
    return parse_reg_text(text)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _hex_lines(prefix: str, raw: bytes) -> str:
    pairs = [f"{b:02x}" for b in raw]
    if not pairs:
        return prefix
    chunks = [",".join(pairs[i : i + _HEX_BYTES_PER_LINE]) for i in range(0, len(pairs), _HEX_BYTES_PER_LINE)]
    return prefix + ",\\\r\n  ".join(chunks)


def _render_value(value: RegValue) -> str:
    kind, data = value.kind, value.data
    if kind == "REG_SZ":
        return f'"{_escape(str(data))}"'
    if kind == "REG_DWORD":
        return f"dword:{int(data) & 0xFFFFFFFF:08x}"
    if kind == "REG_QWORD":
        return _hex_lines("hex(b):", int(data).to_bytes(8, "little"))
    if kind == "REG_EXPAND_SZ":
        return _hex_lines("hex(2):", (str(data) + "\x00").encode("utf-16-le"))
    if kind == "REG_MULTI_SZ":
        joined = "".join(f"{s}\x00" for s in data) + "\x00"
        return _hex_lines("hex(7):", joined.encode("utf-16-le"))
    if kind == "REG_BINARY":
        return _hex_lines("hex:", bytes(data))

    type_id = _ID_BY_KIND.get(kind)
    if type_id is None and kind.startswith("REG_TYPE_"):
        type_id = int(kind[len("REG_TYPE_"):])
    if type_id is None:
        raise RegFileError(msg=f"cannot encode value kind {kind!r}")
    return _hex_lines(f"hex({type_id:x}):", bytes(data))


def render_reg_text(doc: RegDocument) -> str:
    out: List[str] = [HEADER, ""]
    for key in doc.keys:
        if key.delete:
            out += [f"[-{key.path}]", ""]
            continue
        out.append(f"[{key.path}]")
        for name, value in key.values.items():
            lhs = "@" if name == "" else f'"{_escape(name)}"'
            out.append(f"{lhs}={_render_value(value)}")
        for name in key.deleted_values:
            lhs = "@" if name == "" else f'"{_escape(name)}"'
            out.append(f"{lhs}=-")
        out.append("")
    return "\r\n".join(out) + "\r\n"


def dump_reg_file(doc: RegDocument, path: Union[str, Path]) -> None:
    """Write UTF-16-LE with BOM, byte-compatible with `reg import`."""
    Path(path).write_bytes(b"\xff\xfe" + render_reg_text(doc).encode("utf-16-le"))
