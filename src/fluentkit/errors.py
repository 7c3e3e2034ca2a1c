"""Error definitions shared by all fluentkit helpers."""

# ============================================================================
#                           General errors
# ============================================================================


class FluentkitError(Exception):
    """Base class for fluentkit errors."""


class InvalidArgumentError(FluentkitError, ValueError):
    """Raised when a helper receives an argument it cannot work with."""


class InvalidConfigError(FluentkitError):
    """Raised when a fluentkit environment variable holds an unusable value."""

    def __init__(self, name: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid value {value!r} for {name}: {reason}")
        self.name = name
        self.value = value


class InvalidLocaleError(InvalidArgumentError):
    """Raised when a locale identifier is not known to the locale database."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f'Locale "{identifier}" is not supported!')
        self.identifier = identifier


# ============================================================================
#                           Number errors
# ============================================================================


class InvalidNumberError(InvalidArgumentError):
    """Raised when a value is not numeric or not usable for an operation."""


class InvalidUnitError(InvalidArgumentError):
    """Raised when a time-interval unit is unknown or the unit range is reversed."""


class NumberParseError(FluentkitError, ValueError):
    """Raised when a localized number string cannot be parsed."""

    def __init__(self, value: str, locale: str, reason: str) -> None:
        super().__init__(
            f'Failed to parse the value "{value}" for locale {locale}! '
            f"Error message: {reason}"
        )
        self.value = value
        self.locale = locale


# ============================================================================
#                           String errors
# ============================================================================


class InvalidChunkSizeError(InvalidArgumentError):
    """Raised when a string is split into chunks smaller than two characters."""

    def __init__(self, size: int) -> None:
        super().__init__(f"Chunk size must be at least 2, {size} given.")
        self.size = size


# ============================================================================
#                           Filesystem errors
# ============================================================================


class PathNotFoundError(InvalidArgumentError):
    """Raised when a directory helper is given a path that does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f'Path "{path}" does not exist!')
        self.path = path


class NotADirectoryPathError(InvalidArgumentError):
    """Raised when a directory helper is given a path that is not a directory."""

    def __init__(self, path: str) -> None:
        super().__init__(f'Path "{path}" is not a directory!')
        self.path = path


# ============================================================================
#                           Barcode errors
# ============================================================================


class InvalidColorError(InvalidArgumentError):
    """Raised when a barcode color does not suit the selected output format."""


class UnknownBarcodeFormatError(InvalidArgumentError):
    """Raised when a barcode output format is not supported."""

    def __init__(self, fmt: str) -> None:
        super().__init__(f"Barcode format {fmt} is unknown!")
        self.format = fmt


class UnknownBarcodeTypeError(InvalidArgumentError):
    """Raised when a barcode symbology is not provided by the barcode library."""

    def __init__(self, barcode_type: str) -> None:
        super().__init__(f"Barcode type {barcode_type} is unknown!")
        self.type = barcode_type


class InvalidBarcodeError(InvalidArgumentError):
    """Raised when the barcode library rejects the code for the chosen symbology."""

    def __init__(self, code: str, barcode_type: str, reason: str) -> None:
        super().__init__(f'Cannot encode "{code}" as {barcode_type}: {reason}')
        self.code = code
        self.type = barcode_type


class InvalidBarcodeSizeError(InvalidArgumentError):
    """Raised when a barcode width factor or height is not a positive number."""

    def __init__(self, name: str, value: object) -> None:
        super().__init__(f"Barcode {name} must be a positive number, {value!r} given.")
        self.name = name
        self.value = value
