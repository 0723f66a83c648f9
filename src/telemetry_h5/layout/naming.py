"""
Namespace-local dataset naming.

Records of one namespace that share a category are stored as
'<category>', '<category>_1', '<category>_2', ... in input order.
"""

from telemetry_h5.utils.logging import get_logger

log = get_logger(__name__)


class NameRegistry:
    """
    Per-namespace table of base names and their last used suffix counter.

    Create one registry per namespace and pass it explicitly; it must not be
    shared between namespaces.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._issued: set[str] = set()

    def __len__(self) -> int:
        return len(self._issued)

    def __contains__(self, name: object) -> bool:
        return name in self._issued

    def resolve(self, category: str) -> tuple[str, bool]:
        """
        Assign a unique name for category within this namespace.

        The first occurrence keeps its name. Later occurrences get the next
        free '_<count>' suffix; a suffixed name that was already issued
        (e.g. a literal 'x_1' category) is skipped.

        Args:
            category: Base name of the record.

        Returns:
            Tuple of (unique name, whether the record was renamed).
        """
        if category not in self._counts and category not in self._issued:
            self._counts[category] = 0
            self._issued.add(category)
            return category, False

        count = self._counts.get(category, 0)
        candidate = f"{category}_{count + 1}"
        while candidate in self._issued:
            count += 1
            candidate = f"{category}_{count + 1}"
        count += 1

        self._counts[category] = count
        self._issued.add(candidate)
        log.debug("Renamed duplicate dataset", original=category, name=candidate)
        return candidate, True
