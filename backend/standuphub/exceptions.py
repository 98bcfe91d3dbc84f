"""Domain exceptions.

Structured errors raised by the reference lookup and report services. The
content pipeline itself (parser, serializer, short-id codec) never lets these
escape its public entry points; they surface only from the service layer and
are translated to HTTP errors by the API routes.
"""


class ContentError(Exception):
    """Base exception for content and reference errors."""

    def __init__(self, message: str, code: str = "CONTENT_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class MalformedIdentifierError(ContentError):
    """Identifier is neither a full id nor a short id."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            message=f"Malformed identifier '{identifier}'",
            code="MALFORMED_IDENTIFIER",
        )


class TaskNotFoundError(ContentError):
    """No task matches a full id or short id.

    Short ids only encode a prefix, so this is also raised when the prefix
    is not found among the scanned recent tasks.
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            message=f"Task #{identifier} not found",
            code="TASK_NOT_FOUND",
        )


class ReportNotFoundError(ContentError):
    """Requested standup report does not exist."""

    def __init__(self, report_id: str):
        self.report_id = report_id
        super().__init__(
            message=f"Report '{report_id}' not found",
            code="REPORT_NOT_FOUND",
        )


class LookupFailedError(ContentError):
    """The reference store returned something that is not a record list."""

    def __init__(self, entity: str, detail: str):
        self.entity = entity
        super().__init__(
            message=f"{entity} lookup failed: {detail}",
            code="LOOKUP_FAILED",
        )
