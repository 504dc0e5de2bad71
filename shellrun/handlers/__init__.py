"""
Handlers module for shellrun URL schemes.

Input handlers turn a source URL into a local temp file; output handlers
turn a local temp file plus destination URL into a side effect (upload,
capture or move).

Usage:
    from shellrun.handlers import HandlerRegistry

    inputs = HandlerRegistry.create_default_inputs()
    outputs = HandlerRegistry.create_default_outputs(uploader=S3Uploader())
"""

from shellrun.handlers.base import InputHandler, OutputHandler, RunContext
from shellrun.handlers.registry import HandlerRegistry, url_scheme
from shellrun.handlers.inputs import FileInputHandler, HttpInputHandler
from shellrun.handlers.outputs import (
    CaptureOutputHandler,
    FileOutputHandler,
    HttpOutputHandler,
    S3OutputHandler,
)

__all__ = [
    "InputHandler",
    "OutputHandler",
    "RunContext",
    "HandlerRegistry",
    "url_scheme",
    "FileInputHandler",
    "HttpInputHandler",
    "CaptureOutputHandler",
    "FileOutputHandler",
    "HttpOutputHandler",
    "S3OutputHandler",
]
