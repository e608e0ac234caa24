from __future__ import annotations

from enum import Enum


class ArchfolioError(Exception):
    """Base class for every failure this package reports."""


class ValidationErrorKind(str, Enum):
    MALFORMED_PAYLOAD = "malformed_payload"
    OUT_OF_RANGE_GRID_COLS = "out_of_range_grid_cols"
    UNKNOWN_COMPONENT_TYPE = "unknown_component_type"
    INVALID_SPAN = "invalid_span"
    IMAGE_INDEX_OUT_OF_RANGE = "image_index_out_of_range"
    INVALID_TEXT_CONTENT = "invalid_text_content"


class LayoutValidationError(ArchfolioError):
    """A candidate layout failed one of the validator's checks.

    ``component_index`` points at the offending component when the failure is
    component-local, and is None for layout-level failures.
    """

    def __init__(self, kind: ValidationErrorKind, message: str, component_index: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.component_index = component_index

    def __repr__(self) -> str:
        return f"LayoutValidationError(kind={self.kind.value!r}, message={self.message!r}, component_index={self.component_index!r})"


class GenerationErrorKind(str, Enum):
    MODEL_UNAVAILABLE = "model_unavailable"
    SCHEMA_VIOLATION = "schema_violation"


class GenerationError(ArchfolioError):
    def __init__(
        self,
        kind: GenerationErrorKind,
        message: str,
        cause: BaseException | None = None,
        validation: LayoutValidationError | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause
        self.validation = validation

    @property
    def retryable(self) -> bool:
        # Only transient provider failures are retryable.
        return self.kind is GenerationErrorKind.MODEL_UNAVAILABLE

    @classmethod
    def model_unavailable(cls, cause: BaseException) -> GenerationError:
        return cls(GenerationErrorKind.MODEL_UNAVAILABLE, f"layout model unavailable: {cause}", cause=cause)

    @classmethod
    def schema_violation(cls, validation: LayoutValidationError) -> GenerationError:
        return cls(
            GenerationErrorKind.SCHEMA_VIOLATION,
            f"layout response rejected ({validation.kind.value}): {validation.message}",
            validation=validation,
        )


class NoAssetsError(ArchfolioError):
    def __init__(self, message: str = "at least one uploaded image is required") -> None:
        super().__init__(message)


class ProviderNotConfiguredError(ArchfolioError):
    pass


class UploadError(ArchfolioError):
    """The object store could not persist an asset."""
