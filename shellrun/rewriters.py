"""
URL rewriters - remap input or output URLs before scheme dispatch.

A local runner may rewrite s3:// URLs as file:// URLs for offline
development, or point http:// inputs at a mirror.
"""

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class UrlRewriter(Protocol):
    """Protocol for mapping a URL to the URL actually used."""

    def __call__(self, url: str) -> str:
        ...


class PrefixRewriter:
    """
    Rewrites the longest matching URL prefix.

        rewriter = PrefixRewriter({"s3://media/": "file:///srv/media/"})
        rewriter("s3://media/a/b.jpg")  # -> "file:///srv/media/a/b.jpg"

    URLs without a matching prefix are returned unchanged.
    """

    def __init__(self, mapping: Mapping[str, str]):
        self._rules = sorted(mapping.items(), key=lambda item: len(item[0]), reverse=True)

    def __call__(self, url: str) -> str:
        for prefix, replacement in self._rules:
            if url.startswith(prefix):
                return replacement + url[len(prefix):]
        return url

    def __bool__(self) -> bool:
        return bool(self._rules)
