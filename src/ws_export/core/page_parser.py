"""Extract chapters, pictures and metadata from rendered wiki pages."""

import logging
import re
from collections.abc import Collection
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag

from ws_export.core.id_registry import IdRegistry, default_registry
from ws_export.core.rules import (
    EXTERNAL_LINK_CLASSES,
    absolute_image_url,
    align_declaration,
    is_subpage_of,
    link_target_title,
    merge_style,
    picture_names,
    title_namespace,
)
from ws_export.models.book import Chapter, ParsedPage, Picture
from ws_export.models.config import ParserConfig

log = logging.getLogger(__name__)

LIST_TAGS = ("ul", "ol", "dl")
_WHITESPACE = re.compile(r"\s+")


class ParserFinalizedError(RuntimeError):
    """Raised when a frozen parser is asked to touch its tree again."""


def _classes(element: Tag) -> list[str]:
    value = element.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


def _text(element: Tag) -> str:
    return _WHITESPACE.sub(" ", element.get_text(" ")).strip()


class PageParser:
    """Normalize one wiki page for inclusion in an ebook.

    The parser works on a single BeautifulSoup tree. Extraction methods may be
    called in any order; ``get_content`` runs the normalization passes once
    (metadata, pictures, legacy attributes, identifiers) and returns the tree.

    Identifiers are minted through an ``IdRegistry`` shared by every page of
    an export run. Pass one explicitly to isolate runs; otherwise the
    process-wide default registry is used.
    """

    def __init__(
        self,
        document: BeautifulSoup | str | bytes,
        registry: IdRegistry | None = None,
        config: ParserConfig | None = None,
        base_url: str | None = None,
    ):
        if isinstance(document, BeautifulSoup):
            self.soup = document
        else:
            self.soup = BeautifulSoup(document, "lxml")
        self.registry = registry if registry is not None else default_registry
        self.config = config or ParserConfig()
        self.base_url = base_url
        self._metadata: dict[str, str] | None = None
        self._summary: list[Tag] | None = None
        self._processed = False
        self._frozen = False

    # -------------------------------------------------------------------------
    # Default registry helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def get_ids() -> dict[str, str]:
        """Identifiers minted so far through the default registry."""
        return default_registry.snapshot()

    @staticmethod
    def reset_ids() -> None:
        """Start a new export run on the default registry."""
        default_registry.reset()

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise ParserFinalizedError(
                "Page content was already finalized; create a new parser"
            )

    # -------------------------------------------------------------------------
    # Chapters
    # -------------------------------------------------------------------------

    def _summary_blocks(self) -> list[Tag]:
        """Summary containers, located once before ids get rewritten."""
        if self._summary is None:
            markers = set(self.config.summary_ids)
            blocks: list[Tag] = []
            for element in self.soup.find_all(True):
                if element.get("id") in markers or markers.intersection(_classes(element)):
                    # Nested summary blocks are covered by their ancestor
                    if not any(parent is block for parent in element.parents for block in blocks):
                        blocks.append(element)
            self._summary = blocks
        return [block for block in self._summary if not block.decomposed]

    def _chapter_title(
        self,
        link: Tag,
        pictures: Collection[str],
        namespaces: Collection[str],
    ) -> str | None:
        """Page title targeted by ``link`` if it may be a chapter."""
        if EXTERNAL_LINK_CLASSES.intersection(_classes(link)):
            return None
        title = link_target_title(link.get("href"), link.get("title"))
        if title is None:
            return None

        namespace = title_namespace(title)
        if namespace is not None:
            excluded = {
                ns.replace(" ", "_").casefold()
                for ns in [*self.config.excluded_namespaces, *namespaces]
            }
            if namespace.casefold() in excluded:
                return None
            if title.split(":", 1)[1] in pictures:
                return None
        if title in pictures:
            return None
        return title

    def _collect_links(
        self,
        roots: list[Tag],
        pictures: Collection[str],
        namespaces: Collection[str],
    ) -> list[tuple[Tag, str]]:
        links: list[tuple[Tag, str]] = []
        seen: set[str] = set()
        for root in roots:
            for link in root.find_all("a"):
                title = self._chapter_title(link, pictures, namespaces)
                if title is None or title in seen:
                    continue
                seen.add(title)
                links.append((link, title))
        return links

    def get_chapters_list(
        self,
        pictures: Collection[str] = (),
        namespaces: Collection[str] = (),
        nested: bool = False,
    ) -> list[Chapter]:
        """Chapters listed in the summary block(s) of the page.

        Args:
            pictures: Picture titles that must not be taken for chapters
            namespaces: Extra namespace names whose pages are not chapters
            nested: Attach links of nested lists to the preceding chapter

        Returns:
            Chapters in document order, empty when the page has no summary
        """
        self._ensure_mutable()
        blocks = self._summary_blocks()
        links = self._collect_links(blocks, pictures, namespaces)
        log.debug("Found %d summary block(s), %d chapter link(s)", len(blocks), len(links))

        if not nested:
            return [Chapter(title=title, name=_text(link)) for link, title in links]
        return self._nest_links(links, blocks)

    def _nest_links(self, links: list[tuple[Tag, str]], blocks: list[Tag]) -> list[Chapter]:
        """Build the chapter tree from list nesting inside summary blocks.

        A link belongs to the closest earlier link sitting at a shallower list
        depth, whether the nested list is inside that link's ``li``, a sibling
        of it, or an indented ``dl``.
        """
        parents: list[int | None] = []
        stack: list[tuple[int, int]] = []  # (depth, link index)
        current_block = None

        for index, (link, _) in enumerate(links):
            depth = 0
            block = None
            for ancestor in link.parents:
                if any(ancestor is candidate for candidate in blocks):
                    block = ancestor
                    break
                if ancestor.name in LIST_TAGS:
                    depth += 1
            if block is not current_block:
                stack = []
                current_block = block

            while stack and stack[-1][0] >= depth:
                stack.pop()
            parents.append(stack[-1][1] if stack else None)
            stack.append((depth, index))

        def build(index: int) -> Chapter:
            link, title = links[index]
            children = [build(i) for i, p in enumerate(parents) if p == index]
            return Chapter(title=title, name=_text(link), subchapters=children)

        return [build(i) for i, p in enumerate(parents) if p is None]

    def get_subpages_list(
        self,
        title: str,
        pictures: Collection[str] = (),
        namespaces: Collection[str] = (),
    ) -> list[Chapter]:
        """Links anywhere on the page to subpages of ``title``."""
        self._ensure_mutable()
        root = self.soup.body or self.soup
        return [
            Chapter(title=target, name=_text(link))
            for link, target in self._collect_links([root], pictures, namespaces)
            if is_subpage_of(target, title)
        ]

    def get_full_chapters_list(
        self,
        title: str,
        pictures: Collection[str] = (),
        namespaces: Collection[str] = (),
        nested: bool = False,
    ) -> list[Chapter]:
        """Summary chapters followed by subpage links the summary missed.

        With ``nested`` the summary part keeps its subchapters; missing
        subpages are appended at the top level.
        """
        chapters = self.get_chapters_list(pictures, namespaces, nested=nested)
        known: set[str] = set()
        pending = list(chapters)
        while pending:
            chapter = pending.pop()
            known.add(chapter.title)
            pending.extend(chapter.subchapters)
        for chapter in self.get_subpages_list(title, pictures, namespaces):
            if chapter.title not in known:
                known.add(chapter.title)
                chapters.append(chapter)
        return chapters

    # -------------------------------------------------------------------------
    # Pictures and scan pages
    # -------------------------------------------------------------------------

    def get_pictures_list(self) -> dict[str, Picture]:
        """Pictures of the page keyed by title.

        Each ``img`` gets a ``data-title`` attribute holding that key so the
        packager can point it at the bundled file.
        """
        self._ensure_mutable()
        pictures: dict[str, Picture] = {}
        for img in self.soup.find_all("img"):
            src = (img.get("src") or "").strip()
            if not src or src.startswith("data:"):
                continue
            title, name = picture_names(src)
            if not title:
                continue
            pictures[title] = Picture(
                title=title,
                name=name,
                url=absolute_image_url(src, self.base_url),
            )
            img["data-title"] = title
        log.debug("Found %d picture(s)", len(pictures))
        return pictures

    def get_pages_list(self) -> list[str]:
        """Scan pages transcluded into this page, in reading order."""
        self._ensure_mutable()
        pages: list[str] = []
        for marker in self.soup.find_all(attrs={"data-page-name": True}):
            if "ws-pagenum" not in _classes(marker):
                continue
            page = unquote(marker["data-page-name"]).strip().replace(" ", "_")
            if page and page not in pages:
                pages.append(page)
        return pages

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def get_metadata_table(self) -> dict[str, str]:
        """All metadata values found on the page; the first holder of a key wins."""
        if self._metadata is None:
            keys = set(self.config.metadata_keys)
            table: dict[str, str] = {}
            for element in self.soup.find_all(True):
                for key in [element.get("id"), *_classes(element)]:
                    if key in keys and key not in table:
                        table[key] = _text(element)
            self._metadata = table
            log.debug("Found metadata keys: %s", ", ".join(sorted(table)) or "none")
        return dict(self._metadata)

    def metadata_is_set(self, key: str) -> bool:
        return key in self.get_metadata_table()

    def get_metadata(self, key: str) -> str:
        return self.get_metadata_table().get(key, "")

    # -------------------------------------------------------------------------
    # Normalization passes
    # -------------------------------------------------------------------------

    def _remove_chrome(self, is_main_page: bool) -> None:
        selectors = list(self.config.chrome_selectors)
        if not is_main_page:
            selectors.extend(self.config.header_selectors)
        removed = 0
        for selector in selectors:
            for element in self.soup.select(selector):
                if not element.decomposed:
                    element.decompose()
                    removed += 1
        log.debug("Removed %d non-content element(s)", removed)

    def _convert_align_attributes(self) -> None:
        for element in self.soup.find_all(align=True):
            declaration = align_declaration(element.name, element["align"])
            del element["align"]
            if declaration is not None:
                element["style"] = merge_style(declaration, element.get("style"))

    def _clean_ids(self) -> None:
        """Give every identifier a run-wide unique value and follow links to it."""
        mapping: dict[str, str] = {}
        for element in self.soup.find_all(id=True):
            original = element["id"]
            minted = self.registry.mint(original)
            # Links target the first element carrying an id
            mapping.setdefault(original, minted)
            element["id"] = minted

        for link in self.soup.find_all(href=True):
            base, sep, fragment = link["href"].partition("#")
            if not sep:
                continue
            target = mapping.get(fragment) or mapping.get(unquote(fragment))
            if target is not None:
                link["href"] = f"{base}#{target}"
        log.debug("Rewrote %d identifier(s)", len(mapping))

    def get_content(self, is_main_page: bool = False, freeze: bool = False) -> BeautifulSoup:
        """Normalized tree of the page.

        Args:
            is_main_page: Keep the work header, only found on the front page
            freeze: Finalize the parser; later extraction calls will fail

        Once processed, the same tree is returned, frozen or not.
        """
        if not self._processed:
            self._summary_blocks()
            self.get_metadata_table()
            self._remove_chrome(is_main_page)
            self.get_pictures_list()
            self._convert_align_attributes()
            self._clean_ids()
            self._processed = True
        if freeze:
            self._frozen = True
        return self.soup

    def parse(
        self,
        title: str | None = None,
        is_main_page: bool = False,
        nested: bool = False,
    ) -> ParsedPage:
        """Run every extraction and return the normalized page.

        With a work ``title`` the full chapter list is used (summary plus
        subpage links); otherwise only the summary. ``nested`` applies to the
        summary part in both cases.
        """
        metadata = self.get_metadata_table()
        pages = self.get_pages_list()
        if title:
            chapters = self.get_full_chapters_list(title, nested=nested)
        else:
            chapters = self.get_chapters_list(nested=nested)
        content = self.get_content(is_main_page)
        return ParsedPage(
            content=content,
            chapters=chapters,
            pictures=self.get_pictures_list(),
            metadata=metadata,
            pages=pages,
        )
