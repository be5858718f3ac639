"""
Text Normalizer — markup and CSS debris to readable plain text.

Pure functions, no I/O. The pipeline is an ordered tuple of regex steps;
normalize_text() re-runs it until the text stops changing, so
normalize_text(normalize_text(x)) == normalize_text(x).

Best-effort readability cleanup for archives, not a security sanitizer:
anything that merely looks like a tag or a CSS declaration goes.
"""

import re
from collections.abc import Callable

Step = Callable[[str], str]

# Upper bound on fixed-point passes. Real mail settles in two.
MAX_PASSES = 8

ASSET_URL_PLACEHOLDER = "[removed styling/tracking URL]"

# Named entities decoded by step 7. Anything numeric left afterwards is dropped.
ENTITY_TABLE: dict[str, str] = {
    "&nbsp;": " ",
    "&lt;": "<",
    "&gt;": ">",
    "&amp;": "&",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
    "&ldquo;": '"',
    "&rdquo;": '"',
    "&lsquo;": "'",
    "&rsquo;": "'",
    "&ndash;": "–",
    "&mdash;": "—",
    "&hellip;": "…",
    "&copy;": "©",
    "&reg;": "®",
    "&trade;": "™",
}

# CSS property name patterns removed as `property: value;` fragments
CSS_PROPERTY_PREFIXES: tuple[str, ...] = (
    r"font-[a-z-]+",
    r"color",
    r"background[a-z-]*",
    r"margin[a-z-]*",
    r"padding[a-z-]*",
    r"border[a-z-]*",
    r"width",
    r"height",
    r"display",
    r"position",
    r"text-[a-z-]+",
)


# =============================================================================
# PATTERNS
# =============================================================================

_STYLE_SCRIPT_BLOCK = re.compile(r"<(style|script)\b[^>]*>.*?</\1\s*>", re.DOTALL | re.IGNORECASE)
_STYLE_ATTR_DOUBLE = re.compile(r"""style\s*=\s*"[^"]*\"""", re.IGNORECASE)
_STYLE_ATTR_SINGLE = re.compile(r"style\s*=\s*'[^']*'", re.IGNORECASE)
_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG = re.compile(r"</?[A-Za-z!][^<>]*>")

_BRACE_BLOCK = re.compile(r"\{[^}]*\}")
_CSS_DECLARATION = re.compile(
    r"\b(?:" + "|".join(CSS_PROPERTY_PREFIXES) + r")[ \t]*:[ \t]*[^;\n]+;?",
    re.IGNORECASE,
)

_QP_EQUALS = re.compile(r"=3D")
_QP_SPACE = re.compile(r"=20")
_QP_SOFT_BREAK = re.compile(r"=\r?\n")

_NAMED_ENTITY = re.compile("|".join(re.escape(e) for e in ENTITY_TABLE))
_NUMERIC_ENTITY = re.compile(r"&#\d+;")
_HEX_ENTITY = re.compile(r"&#x[0-9a-f]+;", re.IGNORECASE)

_ASSET_URL = re.compile(r"https?://\S*\.(?:css|js|gif|png|jpg|jpeg)\b\S*", re.IGNORECASE)

_HORIZONTAL_RUN = re.compile(r"[ \t]{2,}")
_LEADING_SPACE = re.compile(r"^[ \t]+", re.MULTILINE)
_TRAILING_SPACE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN = re.compile(r"\n{3,}")

_CSS_LINE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(?:" + "|".join(CSS_PROPERTY_PREFIXES) + r")\s*:", re.IGNORECASE),
    re.compile(r"^-?\d+(?:\.\d+)?px\b", re.IGNORECASE),
    re.compile(r"^rgba?\(", re.IGNORECASE),
    re.compile(r"^#[0-9a-f]{3,6}$", re.IGNORECASE),
    re.compile(r"^[;{}]+$"),
)


# =============================================================================
# STEPS (order matters)
# =============================================================================


def remove_style_and_script_blocks(text: str) -> str:
    """1. <style>/<script> tag pairs and everything between them."""
    return _STYLE_SCRIPT_BLOCK.sub("", text)


def strip_style_attributes(text: str) -> str:
    """2. Inline style="..." attributes."""
    text = _STYLE_ATTR_DOUBLE.sub("", text)
    return _STYLE_ATTR_SINGLE.sub("", text)


def remove_comments(text: str) -> str:
    """3. HTML comments, MSO conditionals included."""
    return _COMMENT.sub("", text)


def strip_tags(text: str) -> str:
    """4. Every remaining tag. A bare < or > in prose is not a tag."""
    return _TAG.sub("", text)


def remove_css_fragments(text: str) -> str:
    """5. Brace blocks and property: value; fragments."""
    text = _BRACE_BLOCK.sub("", text)
    return _CSS_DECLARATION.sub("", text)


def undo_quoted_printable(text: str) -> str:
    """6. =3D, =20 and soft line breaks."""
    text = _QP_EQUALS.sub("=", text)
    text = _QP_SPACE.sub(" ", text)
    return _QP_SOFT_BREAK.sub("", text)


def decode_entities(text: str) -> str:
    """7. Named entities from ENTITY_TABLE, then drop numeric leftovers."""
    text = _NAMED_ENTITY.sub(lambda m: ENTITY_TABLE[m.group(0)], text)
    text = _NUMERIC_ENTITY.sub("", text)
    return _HEX_ENTITY.sub("", text)


def replace_asset_urls(text: str) -> str:
    """8. Stylesheet/script/image URLs become a placeholder."""
    return _ASSET_URL.sub(ASSET_URL_PLACEHOLDER, text)


def normalize_whitespace(text: str) -> str:
    """9. \\n line endings, single spaces, trimmed lines, at most one blank line in a row."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_RUN.sub(" ", text)
    text = _LEADING_SPACE.sub("", text)
    text = _TRAILING_SPACE.sub("", text)
    return _BLANK_RUN.sub("\n\n", text)


def _is_css_remnant(line: str) -> bool:
    stripped = line.strip()
    if not stripped:
        return False  # blank lines carry spacing
    return any(p.search(stripped) for p in _CSS_LINE_PATTERNS)


def drop_css_lines(text: str) -> str:
    """10. Lines that are nothing but styling debris."""
    return "\n".join(line for line in text.split("\n") if not _is_css_remnant(line))


FULL_STEPS: tuple[Step, ...] = (
    remove_style_and_script_blocks,
    strip_style_attributes,
    remove_comments,
    strip_tags,
    remove_css_fragments,
    undo_quoted_printable,
    decode_entities,
    replace_asset_urls,
    normalize_whitespace,
    drop_css_lines,
)

# Chat text is mrkdwn, not HTML: braces, links and code must survive.
CHAT_STEPS: tuple[Step, ...] = (
    decode_entities,
    normalize_whitespace,
)


def normalize_text(text: str | None, steps: tuple[Step, ...] = FULL_STEPS) -> str:
    """
    Clean raw text into readable plain text.

    Args:
        text: Raw text, possibly HTML or quoted-printable debris
        steps: Ordered step functions (FULL_STEPS or CHAT_STEPS)

    Returns:
        Cleaned text, trimmed. Same input always gives the same output.
    """
    if not text:
        return ""

    current = text
    for _ in range(MAX_PASSES):
        cleaned = current
        for step in steps:
            cleaned = step(cleaned)
        cleaned = cleaned.strip()
        if cleaned == current:
            break
        current = cleaned
    return current


# =============================================================================
# EMAIL HTML PRE-FILTER
# =============================================================================


def strip_email_cruft(html: str) -> str:
    """
    Strip common email HTML cruft before normalization.

    Email HTML is notoriously messy: this removes content that is invisible
    in a mail client but would survive tag stripping as stray text (hidden
    elements, tracking pixels, spacer cells, empty paragraphs).
    """
    if not html:
        return html

    # Hidden line breaks (Adobe's anti-tracking trick: 7.<br style="display:none"/>1.<br/>26)
    html = re.sub(
        r'<br\s+style="[^"]*display:\s*none[^"]*"\s*/?>',
        '',
        html,
        flags=re.IGNORECASE
    )

    # Tracking pixels (1x1 images)
    html = re.sub(
        r'<img[^>]*(?:width|height)=["\']1["\'][^>]*/?>',
        '',
        html,
        flags=re.IGNORECASE
    )

    # Completely hidden elements (display:none)
    html = re.sub(
        r'<([a-z][a-z0-9]*)[^>]+style="[^"]*display:\s*none[^"]*"[^>]*>.*?</\1>',
        '',
        html,
        flags=re.DOTALL | re.IGNORECASE
    )

    # Spacer cells with just &nbsp;
    html = re.sub(
        r'<td[^>]*>\s*(&nbsp;|\s)*\s*</td>',
        '',
        html,
        flags=re.IGNORECASE
    )

    # Block-level breaks become newlines so paragraphs don't run together
    html = re.sub(
        r'<br\s*/?>|</(?:p|div|tr|li|h[1-6])>',
        '\n',
        html,
        flags=re.IGNORECASE
    )

    # Empty paragraphs and divs
    html = re.sub(
        r'<(p|div)[^>]*>\s*(&nbsp;|\s)*\s*</\1>',
        '',
        html,
        flags=re.IGNORECASE
    )

    return html
