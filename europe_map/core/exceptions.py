"""Pipeline exception taxonomy.

Every domain exception inherits from ``PipelineError`` and carries the
stage that failed plus a machine-readable code, so a run can terminate
with a message that identifies where it stopped.

Concrete errors also inherit from the matching builtin exception
(``OSError``, ``ValueError``, ``ArithmeticError``, ``KeyError``) so
callers can catch them either way.

Taxonomy
--------
- ``DatasetIOError``      download, extraction or disk failure.
- ``DatasetParseError``   malformed dataset or missing layer.
- ``ZeroAreaError``       density requested for a zero-area geometry.
- ``CentroidJoinError``   feature key without a matching centroid.
- ``ValidationError``     bad arguments or contract violations.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"load_dataset"``, ``"crop"``).
        code: Machine-readable error code (e.g. ``"DATASET_IO_FAILED"``).
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(self, message: str = "", *, stage: str = "", code: str = "") -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "error": type(self).__name__,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
        }


class ValidationError(PipelineError):
    """Invalid argument or broken stage contract."""

    default_code = "VALIDATION_FAILED"


class DatasetIOError(PipelineError, OSError):
    """The dataset archive could not be downloaded, extracted or stored."""

    default_stage = "load_dataset"
    default_code = "DATASET_IO_FAILED"


class DatasetParseError(PipelineError, ValueError):
    """The cached dataset is malformed or lacks the expected layer."""

    default_stage = "load_dataset"
    default_code = "DATASET_PARSE_FAILED"


class GeometryError(PipelineError, ValueError):
    """A geometry operation received an empty or unsupported geometry."""

    default_code = "GEOMETRY_INVALID"


class ZeroAreaError(PipelineError, ArithmeticError):
    """Density cannot be computed because the area is zero."""

    default_stage = "aggregate"
    default_code = "ZERO_AREA"


class AggregationError(PipelineError, ValueError):
    """Features are missing an attribute required for grouping."""

    default_stage = "aggregate"
    default_code = "AGGREGATION_FAILED"


class CentroidJoinError(PipelineError, KeyError):
    """A feature key has no corresponding centroid."""

    default_stage = "centroids"
    default_code = "CENTROID_MISSING"
