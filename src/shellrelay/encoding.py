"""Conversion between the host's native console encoding and canonical text.

Commands arrive as canonical text and are encoded into the interpreter's
native code page before being written to its stdin. Output lines are read as
native bytes and decoded back. Characters the native code page cannot
represent are substituted by the codec ("?" when encoding, U+FFFD when
decoding) rather than raising.
"""

import codecs
import locale
import logging
import os
import re

log = logging.getLogger(__name__)

CANONICAL_ENCODING = "utf-8"
UTF8_CODE_PAGE = 65001

_CP_NAME_RE = re.compile(r"cp(\d+)")

# Windows code page identifiers for codecs not named cpNNN.
_WINDOWS_CODE_PAGES = {
    "ascii": 20127,
    "iso8859-1": 28591,
    "iso8859-2": 28592,
    "iso8859-3": 28593,
    "iso8859-4": 28594,
    "iso8859-5": 28595,
    "iso8859-6": 28596,
    "iso8859-7": 28597,
    "iso8859-8": 28598,
    "iso8859-9": 28599,
    "iso8859-13": 28603,
    "iso8859-15": 28605,
    "koi8-r": 20866,
    "koi8-u": 21866,
    "mac-roman": 10000,
    "shift_jis": 932,
    "gbk": 936,
    "euc_kr": 51949,
    "big5": 950,
}


def _oem_code_page() -> int:
    """Return the Windows OEM code page used by console programs."""
    import ctypes

    return ctypes.windll.kernel32.GetOEMCP()


def normalize_encoding(name: str) -> str:
    """Return the canonical codec name, raising LookupError if unknown."""
    return codecs.lookup(name).name


def resolve_native_encoding() -> str:
    """Resolve the encoding the host's interpreter uses for piped I/O."""
    if os.name == "nt":
        raw = f"cp{_oem_code_page()}"
    else:
        raw = locale.getpreferredencoding(False) or CANONICAL_ENCODING
    encoding = normalize_encoding(raw)
    log.debug("native encoding resolved: %s (from %s)", encoding, raw)
    return encoding


def code_page_number(encoding: str) -> int | None:
    """Return the Windows code page number for a codec name, if it has one."""
    name = normalize_encoding(encoding)
    if name == "utf-8":
        return UTF8_CODE_PAGE
    match = _CP_NAME_RE.fullmatch(name)
    if match:
        return int(match.group(1))
    return _WINDOWS_CODE_PAGES.get(name)


def to_native(text: str, encoding: str) -> bytes:
    return text.encode(encoding, errors="replace")


def to_canonical(data: bytes, encoding: str) -> str:
    return data.decode(encoding, errors="replace")


def to_utf8(text: str) -> bytes:
    """Return the UTF-8 wire form of canonical text."""
    return text.encode(CANONICAL_ENCODING, errors="replace")
