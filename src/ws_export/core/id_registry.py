"""Run-scoped registry of element identifiers.

Pages of one book end up concatenated in a single ebook, so an ``id`` minted
for one page must never be minted again for another page of the same run.
"""

import logging
import re
import threading

log = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_STARTS_WITH_LETTER = re.compile(r"^[A-Za-z]")


def normalize_id(value: str) -> str:
    """Turn a raw ``id`` value into a valid XHTML identifier.

    Whitespace runs become underscores and values not starting with an ASCII
    letter get an ``id-`` prefix (``1`` -> ``id-1``).
    """
    value = _WHITESPACE.sub("_", value.strip())
    if not _STARTS_WITH_LETTER.match(value):
        value = "id-" + value
    return value


class IdRegistry:
    """Identifiers minted so far during one export run.

    Duplicates are suffixed with ``-n<k>`` where ``k`` is the number of
    identifiers already minted in the run plus one, so suffixes keep growing
    across documents and are never reused.
    """

    def __init__(self) -> None:
        self._ids: dict[str, str] = {}
        self._lock = threading.Lock()

    def mint(self, value: str) -> str:
        """Register ``value`` and return the unique identifier to use for it."""
        candidate = normalize_id(value)
        with self._lock:
            if candidate in self._ids:
                base = candidate
                counter = len(self._ids) + 1
                candidate = f"{base}-n{counter}"
                while candidate in self._ids:
                    counter += 1
                    candidate = f"{base}-n{counter}"
                log.debug("Identifier %r already used, minted %r", value, candidate)
            self._ids[candidate] = value
        return candidate

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def snapshot(self) -> dict[str, str]:
        """Copy of the minted identifiers mapped to their original values."""
        with self._lock:
            return dict(self._ids)

    def reset(self) -> None:
        """Forget every identifier, e.g. before exporting another book."""
        with self._lock:
            self._ids.clear()


# Shared by parsers that are not given a registry of their own
default_registry = IdRegistry()
