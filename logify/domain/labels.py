"""
Display helpers: readable labels for keys, snippets of long content.
"""

import re
from typing import Optional

ACRONYMS = {
    "bb", "css", "gmt", "guid", "id", "ip", "mp3", "rss", "ssl", "ui", "uri", "url", "utc", "wp",
}

KEY_TO_LABEL_EXCEPTIONS = {
    "_wp_attached_file": "File path",
    "_wp_attachment_image_alt": "Alternative text",
    "_wp_attachment_metadata": "Attachment metadata",
    "blogdescription": "Blog description",
    "blogname": "Blog name",
    "filesize": "File size",
    "post_date": "Created",
    "post_date_gmt": "Created (UTC)",
    "post_modified": "Last modified",
    "post_modified_gmt": "Last modified (UTC)",
    "show_admin_bar_front": "Show toolbar",
    "user_registered": "Registered (UTC)",
    "user_nicename": "Nice name",
    "user_pass": "Password",
    "WPLANG": "Site language",
}

_CAMEL_SPLIT_RE = re.compile(r"(?<!^)(?=[A-Z])")
_TAG_RE = re.compile(r"<[^>]*>")
_SCRIPT_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_SPACE_RE = re.compile(r"\s+")


def key_to_label(key: Optional[str], ucwords: bool = False) -> str:
    """Turn 'post_modified_gmt' or 'blogName' into a readable label."""
    if key is None:
        return ""
    if key in KEY_TO_LABEL_EXCEPTIONS:
        return KEY_TO_LABEL_EXCEPTIONS[key]

    words = []
    for word in filter(None, re.split(r"[-_ ]+", key)):
        if word in (word.lower(), word.upper()):
            words.append(word)
        else:
            words.extend(_CAMEL_SPLIT_RE.split(word))

    result = []
    for word in words:
        if word.lower() in ACRONYMS:
            result.append(word.upper())
        elif ucwords:
            result.append(word[:1].upper() + word[1:])
        else:
            result.append(word)

    label = " ".join(result)
    return label[:1].upper() + label[1:]


def strip_tags(text: Optional[str]) -> Optional[str]:
    if not text:
        return text
    text = _SCRIPT_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    return _SPACE_RE.sub(" ", text).strip()


def get_snippet(content: Optional[str], length: int = 100) -> str:
    content = strip_tags(content or "") or ""
    if len(content) <= length:
        return content
    return content[: length - 3] + "..."


def join_limited(names, limit: int) -> str:
    """Join names with ', ' but stop with ', etc.' before passing the limit."""
    result = ""
    for name in names:
        candidate = f"{result}, {name}" if result else name
        if len(candidate) <= limit - 6:
            result = candidate
        else:
            result += ", etc."
            break
    return result


def version_tuple(version: Optional[str]):
    """'6.4.2' -> (6, 4, 2); non-numeric parts count as 0"""
    parts = []
    for part in re.split(r"[.\-+]", str(version or "")):
        digits = re.match(r"\d+", part)
        parts.append(int(digits.group()) if digits else 0)
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def version_change_verb(old_version: Optional[str], new_version: Optional[str]) -> str:
    old, new = version_tuple(old_version), version_tuple(new_version)
    if old < new:
        return "Upgraded"
    if old > new:
        return "Downgraded"
    return "Re-installed"
