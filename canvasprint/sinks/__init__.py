"""Delivery sinks for finished export documents."""

from .diagnostic import DIAGNOSTIC_LOGGER, DiagnosticSink
from .download import DownloadSink, FileDownloader, MEDIA_TYPE, from_data_uri, to_data_uri
from .registry import DeliverySink, SinkRegistry

__all__ = [
    "DIAGNOSTIC_LOGGER",
    "DeliverySink",
    "DiagnosticSink",
    "DownloadSink",
    "FileDownloader",
    "MEDIA_TYPE",
    "SinkRegistry",
    "from_data_uri",
    "to_data_uri",
]
