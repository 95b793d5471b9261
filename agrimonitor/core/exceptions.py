"""Exceptions raised by AgriMonitor components."""


class AgriMonitorError(Exception):
    """Base exception for the AgriMonitor service."""


class SensorError(AgriMonitorError):
    """The sensor driver failed to produce a result at all."""


class SensorUnavailableError(SensorError):
    """No sensor driver library is installed on this host."""


class CaptureError(AgriMonitorError):
    """A still capture did not produce an image."""


class DocumentStoreError(AgriMonitorError):
    """The JSON document store could not be read or written."""


class DocumentNotFoundError(DocumentStoreError):
    """A collection or document id does not exist."""
