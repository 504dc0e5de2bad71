"""
Handler Registry for dispatching URLs to scheme handlers.

A registry maps lower-cased URL schemes to handler instances. The runner
keeps two: one for inputs, one for outputs. Looking up a scheme that has no
handler raises UnsupportedSchemeError, which fails the run.
"""

from typing import Generic, Optional, TypeVar, TYPE_CHECKING
from urllib.parse import urlparse

from shellrun.errors import UnsupportedSchemeError
from shellrun.handlers.base import InputHandler, OutputHandler

if TYPE_CHECKING:
    import requests

    from shellrun.uploader import Uploader

H = TypeVar("H")


def url_scheme(url: str) -> str:
    """Return the lower-cased scheme of url ("" for bare paths)."""
    return urlparse(url).scheme.lower()


class HandlerRegistry(Generic[H]):
    """
    Registry for handler dispatch by URL scheme.

    Usage:
        inputs = HandlerRegistry.create_default_inputs()
        handler = inputs.for_url("https://example.com/a.jpg")
        handler.fetch(url, destination)

        outputs = HandlerRegistry.create_default_outputs(uploader=S3Uploader())
        outputs.register("gs", MyGcsHandler())
    """

    def __init__(self, context: str) -> None:
        """
        Initialize an empty registry.

        Args:
            context: "input" or "output", used in error messages
        """
        self.context = context
        self._handlers: dict[str, H] = {}

    def register(self, scheme: str, handler: H) -> None:
        self._handlers[scheme.lower()] = handler

    def has(self, scheme: str) -> bool:
        return scheme.lower() in self._handlers

    def list_schemes(self) -> list[str]:
        return list(self._handlers.keys())

    def get(self, scheme: str, url: str = "") -> H:
        """
        Get the handler for a scheme.

        Raises:
            UnsupportedSchemeError: If no handler is registered for scheme
        """
        handler = self._handlers.get(scheme.lower())
        if handler is None:
            raise UnsupportedSchemeError(self.context, scheme, url)
        return handler

    def for_url(self, url: str) -> H:
        return self.get(url_scheme(url), url)

    @classmethod
    def create_default_inputs(
        cls,
        session: "Optional[requests.Session]" = None,
        timeout: Optional[float] = None,
    ) -> "HandlerRegistry[InputHandler]":
        """
        Create the input registry: http, https, file and bare paths.

        Args:
            session: requests session shared by the http handlers
            timeout: Per-request timeout in seconds (None waits forever)
        """
        from shellrun.handlers.inputs import FileInputHandler, HttpInputHandler

        registry: HandlerRegistry[InputHandler] = cls("input")
        http = HttpInputHandler(session=session, timeout=timeout)
        registry.register("http", http)
        registry.register("https", http)
        local = FileInputHandler()
        registry.register("", local)
        registry.register("file", local)
        return registry

    @classmethod
    def create_default_outputs(
        cls,
        uploader: "Optional[Uploader]" = None,
        session: "Optional[requests.Session]" = None,
        timeout: Optional[float] = None,
    ) -> "HandlerRegistry[OutputHandler]":
        """
        Create the output registry: s3, http, https, capture and file.

        Args:
            uploader: Uploader for s3:// outputs; s3 deliveries fail without one
            session: requests session shared by the http handlers
            timeout: Per-request timeout in seconds (None waits forever)
        """
        from shellrun.handlers.outputs import (
            CaptureOutputHandler,
            FileOutputHandler,
            HttpOutputHandler,
            S3OutputHandler,
        )

        registry: HandlerRegistry[OutputHandler] = cls("output")
        registry.register("s3", S3OutputHandler(uploader))
        http = HttpOutputHandler(session=session, timeout=timeout)
        registry.register("http", http)
        registry.register("https", http)
        registry.register("capture", CaptureOutputHandler())
        registry.register("file", FileOutputHandler())
        return registry
