"""Exceptions raised by the scan pipeline."""

from __future__ import annotations


class ScanError(Exception):
    """Base class for failures that end a scan."""


class IngestionError(ScanError):
    """The photo could not be read, decoded or re-fetched."""


class AnalysisTransportError(ScanError):
    """The analysis request failed before a response arrived."""


class AnalysisParseError(ScanError):
    """A response arrived but did not match the expected schema."""


class SaveConsistencyWarning(UserWarning):
    """A save toggle referenced a dish id that no collection knows about."""
