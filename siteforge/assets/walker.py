"""Find remote URLs inside a configuration tree.

The walker visits every mapping and list without a depth limit and records
each ``http://``/``https://`` string together with the container and key that
hold it, so the caller can replace the value in place later.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

REMOTE_PREFIXES = ("http://", "https://")

Container = cabc.MutableMapping[typ.Any, typ.Any] | cabc.MutableSequence[typ.Any]


def is_remote_url(value: object) -> bool:
    """Return ``True`` for strings that point at a remote HTTP(S) resource."""
    return isinstance(value, str) and value.startswith(REMOTE_PREFIXES)


@dc.dataclass(slots=True)
class AssetReference:
    """A remote URL and the slot in the tree that holds it."""

    container: Container
    key: typ.Any
    url: str

    def set(self, value: str) -> None:
        """Replace the referenced slot's value with ``value``."""
        self.container[self.key] = value


def collect_remote_urls(tree: object) -> list[AssetReference]:
    """Return every remote URL reference in ``tree`` in document order.

    Examples
    --------
    >>> doc = {"hero": {"image": "https://cdn.test/a.jpg"}, "tags": ["x"]}
    >>> [ref.url for ref in collect_remote_urls(doc)]
    ['https://cdn.test/a.jpg']
    """
    references: list[AssetReference] = []
    _walk(tree, references)
    return references


def _walk(node: object, references: list[AssetReference]) -> None:
    match node:
        case cabc.MutableMapping():
            for key, value in node.items():
                if is_remote_url(value):
                    references.append(AssetReference(node, key, value))
                else:
                    _walk(value, references)
        case cabc.MutableSequence():
            for index, value in enumerate(node):
                if is_remote_url(value):
                    references.append(AssetReference(node, index, value))
                else:
                    _walk(value, references)
        case _:
            return


def group_by_url(references: cabc.Iterable[AssetReference]) -> dict[str, list[AssetReference]]:
    """Group references by URL, keeping first-seen order."""
    groups: dict[str, list[AssetReference]] = {}
    for reference in references:
        groups.setdefault(reference.url, []).append(reference)
    return groups


__all__ = ["AssetReference", "collect_remote_urls", "group_by_url", "is_remote_url"]
