from __future__ import annotations

import html
import os
import re
from collections.abc import Mapping, Sized
from pathlib import Path
from typing import Any, Dict

import yaml


_SCRIPT_STYLE_PATTERN = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_PATTERN = re.compile(r"<[^>]*>")
_LESS_THAN_PATTERN = re.compile(r"<[^>]*?((?=<)|>|$)")
_WHITESPACE_PATTERN = re.compile(r"[\r\n\t ]+")
_OCTET_PATTERN = re.compile(r"%[a-f0-9]{2}", re.IGNORECASE)
_KEY_PATTERN = re.compile(r"[^a-z0-9_-]+")
_LEADING_INT_PATTERN = re.compile(r"^\s*[+-]?\d+")
_LEADING_FLOAT_PATTERN = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_EMAIL_LOCAL_PATTERN = re.compile(r"[^a-zA-Z0-9!#$%&'*+/=?^_`{|}~.-]")
_EMAIL_LABEL_PATTERN = re.compile(r"[^a-z0-9-]+", re.IGNORECASE)

_URL_DISALLOWED_PATTERN = re.compile(r"[^a-z0-9\-~+_.?#=!&;,/:%@$|*'()\[\]\x80-\xff]", re.IGNORECASE)
_URL_SCHEME_PATTERN = re.compile(r"^([a-z][a-z0-9+.\-]*):", re.IGNORECASE)
ALLOWED_URL_SCHEMES = frozenset(
    {
        "http",
        "https",
        "ftp",
        "ftps",
        "mailto",
        "news",
        "irc",
        "irc6",
        "ircs",
        "gopher",
        "nntp",
        "feed",
        "telnet",
        "mms",
        "rtsp",
        "sms",
        "svn",
        "tel",
        "fax",
        "xmpp",
        "webcal",
        "urn",
    }
)

# Falsy string values for submitted form data
_FALSE_TEXT = frozenset({"", "0"})


def is_truthy(value: Any) -> bool:
    """Return whether a submitted value counts as "set".

    Form values arrive as strings, so ``"0"`` and ``""`` are treated as unset
    alongside ``None``, ``False``, zero and empty containers.
    """
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value not in _FALSE_TEXT
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, Sized):
        return len(value) > 0
    return True


def as_text(value: Any) -> str:
    """Return the string form used when comparing and printing stored values."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def esc_html(value: Any) -> str:
    return html.escape(as_text(value), quote=False)


def esc_attr(value: Any) -> str:
    return html.escape(as_text(value), quote=True)


def _escape_stray_less_than(text: str) -> str:
    def replace(match: re.Match[str]) -> str:
        chunk = match.group(0)
        if ">" in chunk:
            return chunk
        return html.escape(chunk, quote=False)

    return _LESS_THAN_PATTERN.sub(replace, text)


def strip_all_tags(text: str) -> str:
    """Remove HTML tags, dropping the bodies of script and style elements."""
    text = _SCRIPT_STYLE_PATTERN.sub("", text)
    return _TAG_PATTERN.sub("", text)


def sanitize_text_field(value: Any) -> str:
    """Strip markup, control whitespace and percent-encoded octets from a value."""
    if isinstance(value, (dict, list, tuple, set)):
        return ""
    text = as_text(value)

    if "<" in text:
        text = strip_all_tags(_escape_stray_less_than(text))

    text = _WHITESPACE_PATTERN.sub(" ", text).strip()

    found = False
    while _OCTET_PATTERN.search(text):
        text = _OCTET_PATTERN.sub("", text)
        found = True
    if found:
        text = re.sub(r" +", " ", text).strip()

    return text


def sanitize_key(value: Any) -> str:
    """Lowercase a value and collapse characters outside ``[a-z0-9_-]`` to ``-``."""
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        return ""
    return _KEY_PATTERN.sub("-", as_text(value).lower())


def sanitize_email(value: Any) -> str:
    """Return a cleaned email address, or an empty string when it is not plausible."""
    if not isinstance(value, str):
        return ""
    email = value.strip()
    if len(email) < 6 or email.find("@", 1) == -1:
        return ""

    local, domain = email.split("@", 1)
    local = _EMAIL_LOCAL_PATTERN.sub("", local)
    if not local:
        return ""

    if ".." in domain:
        return ""
    domain = domain.strip(" \t\n\r\0\x0b.")
    labels = []
    for label in domain.split("."):
        label = _EMAIL_LABEL_PATTERN.sub("", label.strip(" \t\n\r\0\x0b-"))
        if label:
            labels.append(label)
    if len(labels) < 2:
        return ""

    return f"{local}@{'.'.join(labels)}"


def esc_url_raw(value: Any) -> str:
    """Clean a URL for storage; disallowed schemes yield an empty string."""
    if not isinstance(value, str):
        return ""
    url = value.strip()
    if not url:
        return ""

    url = url.replace(" ", "%20")
    url = _URL_DISALLOWED_PATTERN.sub("", url)
    if not url:
        return ""
    for encoded in ("%0d", "%0a", "%0D", "%0A"):
        url = url.replace(encoded, "")
    url = url.replace(";//", "://")

    if ":" not in url and url[0] not in "/#?":
        url = "http://" + url

    match = _URL_SCHEME_PATTERN.match(url)
    if match and match.group(1).lower() not in ALLOWED_URL_SCHEMES:
        return ""
    return url


def absint(value: Any) -> int:
    """Coerce a value to a non-negative integer; anything else becomes 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT_PATTERN.match(value)
        number = int(match.group(0)) if match else 0
    else:
        return 0
    return number if number > 0 else 0


def to_float(value: Any) -> float:
    """Parse the leading number of a value, defaulting to 0.0."""
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _LEADING_FLOAT_PATTERN.match(value)
        if match:
            return float(match.group(0))
    return 0.0


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: expand_env(val) for key, val in value.items()}
    return value


def load_yaml_file(path: Path, *, expand: bool = True) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return expand_env(data) if expand else data


def dump_yaml_file(path: Path, data: Mapping[str, Any]) -> None:
    ensure_directory(path.parent)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(dict(data), handle, sort_keys=False, allow_unicode=True)
