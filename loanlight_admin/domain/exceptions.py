"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class GatewayError(DomainException):
    """Remote data backend returned an error or is unavailable"""

    pass


class GatewayTimeoutError(GatewayError):
    """Remote data backend did not answer within the configured timeout"""

    pass


class NotFoundError(GatewayError):
    """Requested row does not exist in the remote data backend"""

    pass


class ValidationError(DomainException):
    """Request is missing required fields"""

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = missing_fields
        super().__init__(f"Missing required fields: {', '.join(missing_fields)}")


class ConfigurationError(DomainException):
    """Required external credentials or settings are not configured"""

    pass


class ReportError(DomainException):
    """Report could not be rendered or exported"""

    pass


class PrintSurfaceUnavailableError(ReportError):
    """Display surface for printing could not be opened (e.g. pop-up blocked)"""

    pass


class EmptyDatasetError(ReportError):
    """Nothing to export"""

    pass


class ExportError(ReportError):
    """Serializer failed while producing an export"""

    pass
