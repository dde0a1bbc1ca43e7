"""Error taxonomy for acquisition and retrieval."""

from typing import Optional


class SiteRAGError(Exception):
    """Base error for the site retrieval pipeline."""


class FetchError(SiteRAGError):
    """A single page could not be navigated or extracted."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Error extracting {url}: {reason}")
        self.url = url
        self.reason = reason


class GraphWriteError(SiteRAGError):
    """A single graph write batch failed."""

    def __init__(self, batch: int, reason: str, phase: str = "node"):
        super().__init__(f"Error writing {phase} batch {batch}: {reason}")
        self.batch = batch
        self.phase = phase
        self.reason = reason


class IndexWriteError(SiteRAGError):
    """A single index upload batch failed."""

    def __init__(self, batch: int, reason: str):
        super().__init__(f"Error uploading batch {batch}: {reason}")
        self.batch = batch
        self.reason = reason


class SchemaError(SiteRAGError):
    """A constraint or index statement failed. Not fatal; it may already exist."""

    def __init__(self, statement: str, reason: str):
        super().__init__(f"Schema statement failed ({' '.join(statement.split()[:3])}): {reason}")
        self.statement = statement
        self.reason = reason


class FatalInitError(SiteRAGError):
    """The rendering context or a store cannot be reached at all."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
