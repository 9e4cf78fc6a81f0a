class SheetExtractError(RuntimeError):
    pass


class InvalidImageReferenceError(SheetExtractError, ValueError):
    """Raised before dispatch when an image reference cannot be sent to the model."""


class ExtractionError(SheetExtractError):
    """Remote model call failed; the message is shown to the user as-is."""


class StructuredExtractionError(ExtractionError):
    pass


class NoDataError(SheetExtractError):
    pass
