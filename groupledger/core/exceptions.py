class LedgerError(Exception):
    """
    Base class for business-rule violations raised by the services.

    The HTTP layer turns these into responses through the handler
    registered in main.py; services never build HTTP responses themselves.
    """

    kind = "ledger_error"
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(LedgerError):
    kind = "not_found"
    status_code = 404


class Unauthorized(LedgerError):
    kind = "unauthorized"
    status_code = 403


class Conflict(LedgerError):
    kind = "conflict"
    status_code = 409


class InvalidArgument(LedgerError):
    kind = "invalid_argument"
    status_code = 400
