"""
Error types raised by the money supply pipeline.

All errors are fatal to the series/transform being computed. The trend engine
catches them per series so that one failing series does not stop the others.
"""


class MoneyTrendError(ValueError):
    """Base class for pipeline errors"""


class AlignmentError(MoneyTrendError):
    """Input series do not share a usable date overlap"""


class InsufficientDataError(MoneyTrendError):
    """Too few rows to build an index or fit a regression"""


class DomainError(MoneyTrendError):
    """Value outside the domain of a transform (e.g. log of a non-positive number)"""


class DataCollectionError(MoneyTrendError):
    """Upstream data source failed to return observations"""
