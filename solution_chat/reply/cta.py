"""Commercial-intent detection and the contact call-to-action marker."""

import re

CTA_MARKER = "%%CTA_CONTACT%%"
CTA_SEPARATOR = "\n\n---\n"

CONTACT_KEYWORDS: tuple[str, ...] = (
    "料金",
    "費用",
    "値段",
    "価格",
    "見積",
    "詳細",
    "導入",
    "資料",
    "相談",
    "依頼",
    "契約",
    "価格表",
    "金額",
)

_CONTACT_RE = re.compile("|".join(re.escape(k) for k in CONTACT_KEYWORDS))


def needs_contact(utterance: str) -> bool:
    """True when the user's message asks about pricing, contracts, materials, etc.

    Case-sensitive substring match, no stemming.
    """
    return _CONTACT_RE.search(str(utterance)) is not None


def strip_marker(text: str) -> str:
    """Remove every occurrence of the reserved marker."""
    return text.replace(CTA_MARKER, "")


def append_cta(text: str) -> str:
    """Append the separator line and the marker to a reply."""
    return f"{text}{CTA_SEPARATOR}{CTA_MARKER}"
