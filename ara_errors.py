"""
Exceptions raised by the ARA detector and its market-data collaborator.
"""


class ARADetectorError(Exception):
    """Base class for detector errors."""


class SourceUnavailable(ARADetectorError):
    """One upstream read (orderbook, market detector, historical, profile) failed."""

    def __init__(self, source: str, instrument: str, reason: str):
        self.source = source
        self.instrument = instrument
        self.reason = reason
        super().__init__(f"{instrument}: {source} unavailable ({reason})")


class EvaluationError(ARADetectorError):
    """Evaluation of a single emiten failed; message is tagged with the emiten code."""

    def __init__(self, instrument: str, reason: str):
        self.instrument = instrument
        self.reason = reason
        super().__init__(f"{instrument}: {reason}")


class StockbitAuthError(ARADetectorError):
    """No API token configured."""
