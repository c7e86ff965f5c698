"""Error types shared across the fetch, render and mirror layers."""

from enum import Enum


class WikiError(Exception):
    """Base class for every error raised by wiki-mirror."""


class NetworkError(WikiError):
    """Transport or HTTP level failure while talking to the wiki."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class ParsingError(WikiError):
    """A response body (HTML, JSON) could not be parsed."""


class WikiIOError(WikiError):
    """Filesystem failure (directory creation, reads, writes)."""


class CoordinationError(WikiError):
    """The mirror run itself failed, as opposed to a single page."""


class NoPageFound(WikiError):
    """The requested page has no content; carries similar page titles."""

    def __init__(self, title: str, suggestions: list[str] | None = None):
        self.title = title
        self.suggestions = list(suggestions or [])[:5]
        super().__init__(f"no page found for '{title}'")

    def __str__(self) -> str:
        if not self.suggestions:
            return f"no page found for '{self.title}'"
        listing = "\n".join(self.suggestions)
        return f"no page found for '{self.title}', similar pages:\n{listing}"


class ApiResponseIssue(str, Enum):
    """What was wrong with a malformed wiki API payload."""

    MISSING_ELEMENT = "missing-element"
    NOT_AN_ARRAY = "not-an-array"
    LENGTH_MISMATCH = "length-mismatch"


class InvalidApiResponse(WikiError):
    """The wiki API answered with a payload of an unexpected shape."""

    def __init__(self, kind: ApiResponseIssue, index: int | None = None):
        self.kind = kind
        self.index = index
        if kind == ApiResponseIssue.MISSING_ELEMENT:
            message = f"open search response is missing element {index}"
        elif kind == ApiResponseIssue.NOT_AN_ARRAY:
            message = f"open search element {index} should be an array"
        else:
            message = "open search name and URL arrays have different lengths"
        super().__init__(message)
