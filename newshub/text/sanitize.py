"""HTML sanitisation for titles, excerpts and other untrusted text."""

from urllib.parse import urlsplit

from bs4 import BeautifulSoup, CData, Comment, Declaration, Doctype, ProcessingInstruction

ALLOWED_TAGS = frozenset({"b", "i", "em", "strong", "a", "p", "br", "ul", "ol", "li"})
ALLOWED_ATTRIBUTES = frozenset({"href", "target", "rel"})
ALLOWED_URL_SCHEMES = frozenset({"http", "https", "mailto"})

# Markup nodes that are not elements and never carry visible text
NON_TEXT_NODES = (Comment, CData, Declaration, Doctype, ProcessingInstruction)

# Elements removed together with everything inside them
DROP_WITH_CONTENT = (
    "script",
    "style",
    "iframe",
    "object",
    "embed",
    "noscript",
    "template",
    "svg",
)

def _parse(dirty: str) -> BeautifulSoup:
    soup = BeautifulSoup(dirty or "", "html.parser")
    for node in soup.find_all(string=lambda s: isinstance(s, NON_TEXT_NODES)):
        node.extract()
    for tag in soup.find_all(DROP_WITH_CONTENT):
        tag.decompose()
    return soup


def is_safe_url(href: str) -> bool:
    """
    True for relative URLs and http, https or mailto links.

    Control characters and whitespace are removed first, as browsers
    ignore them when resolving the scheme.
    """
    compact = "".join(ch for ch in href if ch > " " and ch != "\x7f")
    try:
        scheme = urlsplit(compact).scheme
    except ValueError:
        return False
    return not scheme or scheme.lower() in ALLOWED_URL_SCHEMES


def strip_html(dirty: str) -> str:
    """Remove all markup, returning only text content."""
    if not dirty:
        return ""
    return _parse(dirty).get_text()


def sanitize_html(dirty: str) -> str:
    """
    Keep a small whitelist of inline formatting tags.

    Disallowed elements are unwrapped (their text survives) except for
    script-like elements, which are removed with their contents. Comments,
    doctypes and other non-element nodes are removed. Only href/target/rel
    attributes are kept, and hrefs outside http, https and mailto are
    dropped.
    """
    if not dirty:
        return ""

    soup = _parse(dirty)
    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue

        for attr in list(tag.attrs):
            if attr not in ALLOWED_ATTRIBUTES:
                del tag.attrs[attr]

        href = tag.attrs.get("href")
        if href is not None and not is_safe_url(str(href)):
            del tag.attrs["href"]

    return str(soup)


def truncate_on_word(text: str, max_length: int) -> str:
    """
    Cut text to max_length, preferring a word boundary.

    The boundary is only used when it falls within the last 20% of the
    allowed length; otherwise a hard cut is made.
    """
    if len(text) <= max_length:
        return text
    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space]
    return truncated


def sanitize_text(dirty: str, max_length: int = 2000) -> str:
    """Strip markup, trim, and bound the length of a plain-text field."""
    clean = strip_html(dirty).strip()
    return truncate_on_word(clean, max_length)
