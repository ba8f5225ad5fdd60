"""Error kinds raised by the extractors and collaborators."""


class ThemeshotError(Exception):
    """Base class; `kind` is the tag reported in failure results."""
    kind = "error"


class DecodeError(ThemeshotError):
    """Image buffer is not a decodable raster image."""
    kind = "decode_error"


class NavigationError(ThemeshotError):
    """Page could not be loaded (DNS, refused connection, bad URL...)."""
    kind = "navigation_error"


class NavigationTimeout(NavigationError):
    """Page did not reach network-idle within the navigation budget."""
    kind = "navigation_timeout"


class EvaluationError(ThemeshotError):
    """In-page script threw or returned malformed data."""
    kind = "evaluation_error"


class BrowserError(ThemeshotError):
    kind = "browser_error"


class CaptureError(ThemeshotError):
    kind = "capture_error"


class UploadError(ThemeshotError):
    kind = "upload_error"
