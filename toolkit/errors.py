class ToolkitError(Exception):
    """
    Base exception for all toolkit failures.
    """

    pass


class DecodeError(ToolkitError):
    """
    Raised when a request body is not exactly one valid JSON value.
    """

    pass


class PayloadTooLarge(DecodeError):
    """
    Raised when a request body exceeds the configured byte ceiling.
    """

    pass


class MultipleJSONValues(DecodeError):
    """
    Raised when anything other than whitespace follows the first JSON value.
    """

    def __init__(self, message: str = "body may have only one json value"):
        super().__init__(message)


class EncodeError(ToolkitError):
    """
    Raised when a value cannot be marshalled to JSON.
    """

    pass


class TransportError(ToolkitError):
    """
    Raised when an outbound request never produced a response.

    status_code is always 0: no remote status exists.
    """

    status_code = 0


class FormParseError(ToolkitError):
    """
    Raised when a multipart form cannot be parsed.
    """

    pass


class FormTooLarge(FormParseError):
    """
    Raised when a multipart form exceeds its size ceiling.
    """

    pass


class DetectionError(ToolkitError):
    """
    Raised when an uploaded stream cannot be sniffed or rewound.
    """

    pass


class FileTypeNotAllowed(ToolkitError):
    """
    Raised when a sniffed content type is outside the caller's allow-list.
    """

    pass
