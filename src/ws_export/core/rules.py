"""Rule tables shared by the page parser passes."""

import re
from dataclasses import dataclass
from urllib.parse import parse_qs, unquote, urljoin, urlsplit

# =============================================================================
# Legacy alignment attributes
# =============================================================================


@dataclass(frozen=True)
class AlignRule:
    """Inline style replacing an ``align`` attribute."""

    tags: frozenset[str]  # Empty means any element
    value: str
    declaration: str

    def matches(self, tag_name: str, value: str) -> bool:
        if self.value != value:
            return False
        return not self.tags or tag_name in self.tags


TABLE_TAGS = frozenset({"table"})

# First match wins, so table rules come before the generic ones
ALIGN_RULES: list[AlignRule] = [
    AlignRule(TABLE_TAGS, "center", "margin: auto;"),
    AlignRule(TABLE_TAGS, "right", "margin-left: auto;"),
    AlignRule(TABLE_TAGS, "left", "margin-right: auto;"),
    AlignRule(frozenset(), "center", "text-align: center;"),
    AlignRule(frozenset(), "right", "text-align: right;"),
    AlignRule(frozenset(), "left", "text-align: left;"),
    AlignRule(frozenset(), "justify", "text-align: justify;"),
]


def align_declaration(tag_name: str, value: str) -> str | None:
    """Style declaration for ``align=value`` on ``tag_name``, if any."""
    value = value.strip().lower()
    for rule in ALIGN_RULES:
        if rule.matches(tag_name, value):
            return rule.declaration
    return None


def merge_style(declaration: str, existing: str | None) -> str:
    """Put ``declaration`` in front of an existing ``style`` value."""
    existing = (existing or "").strip().lstrip(";").strip()
    if not existing:
        return declaration
    return f"{declaration} {existing}"


# =============================================================================
# Image URLs
# =============================================================================

# .../thumb/<h>/<hh>/<file>/<size>px-<file>[.png]
THUMB_PATTERN = re.compile(
    r"/thumb/[^/]+/[^/]+/(?P<file>[^/]+)/(?P<thumb>[^/]*?\d+px-[^/]+)$"
)


def picture_names(url: str) -> tuple[str, str]:
    """Return ``(title, name)`` for an image URL.

    Thumbnail URLs keep their size in the title so every size is tracked on
    its own; anything else is keyed by its last path segment.
    """
    path = urlsplit(url).path or url
    match = THUMB_PATTERN.search(path)
    if match:
        name = unquote(match.group("file"))
        return f"{name}-{unquote(match.group('thumb'))}", name
    name = unquote(path.rstrip("/").rsplit("/", 1)[-1])
    return name, name


def absolute_image_url(url: str, base_url: str | None = None) -> str:
    """Make ``url`` absolute when that can be done without guessing."""
    if url.startswith("//"):
        return "https:" + url
    if base_url and not urlsplit(url).scheme:
        return urljoin(base_url, url)
    return url


# =============================================================================
# Wiki links
# =============================================================================

EXTERNAL_LINK_CLASSES = frozenset({"external", "extiw", "image", "new", "internal"})


def normalize_title(title: str) -> str:
    """Decode a page title and use underscores for spaces."""
    return unquote(title).strip().replace(" ", "_")


def link_target_title(href: str | None, title_attr: str | None = None) -> str | None:
    """Wiki page title a link points to, or None for non-page links.

    Handles Parsoid (``./Title``), classic (``/wiki/Title``) and script
    (``/w/index.php?title=Title``) link forms. Fragments are dropped.
    """
    href = (href or "").strip()
    if not href or href.startswith("#"):
        return None

    parts = urlsplit(href)
    if parts.scheme or parts.netloc:
        return None  # external, mailto:, javascript:

    query = parse_qs(parts.query)
    if "action" in query or "redlink" in query:
        return None

    path = parts.path
    if path.endswith("index.php") and "title" in query:
        raw = query["title"][0]
    elif path.startswith("./"):
        raw = path[2:]
    elif "/wiki/" in path:
        raw = path.split("/wiki/", 1)[1]
    elif title_attr:
        raw = title_attr
    else:
        return None

    title = normalize_title(raw)
    return title or None


def title_namespace(title: str) -> str | None:
    """Namespace prefix of ``title`` (``File:X.jpg`` -> ``File``)."""
    head, sep, _ = title.partition(":")
    if not sep or "/" in head or not head:
        return None
    return head


def is_subpage_of(title: str, work_title: str) -> bool:
    """Whether ``title`` is ``<work_title>/<something>``, ignoring case."""
    prefix = normalize_title(work_title).casefold() + "/"
    candidate = title.casefold()
    return candidate.startswith(prefix) and len(candidate) > len(prefix)
