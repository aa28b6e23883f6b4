class SteelBillError(Exception):
    """Base class for application errors that map to an HTTP response."""

    status = 500

    def to_dict(self):
        return {"error": str(self)}


class ValidationError(SteelBillError):
    """Bad input from the operator (empty cart, negative rate, ...)."""

    status = 400


class UnknownEntityError(SteelBillError):
    status = 404

    def __init__(self, table, entity_id):
        self.table = table
        self.entity_id = entity_id
        super().__init__(f"Unknown {table} id: {entity_id}")


class GatewayError(SteelBillError):
    """A backend read or write failed. Carries the backend's message."""

    status = 502


class LoadError(SteelBillError):
    """The initial fetch of all collections failed."""

    status = 503

    def to_dict(self):
        return {"error": str(self), "retry": "/api/reload"}


class WriteError(SteelBillError):
    """A remote write failed after the optimistic local mutation."""

    status = 502

    def __init__(self, operation, message, rolled_back=False):
        self.operation = operation
        self.rolled_back = rolled_back
        super().__init__(f"{operation} failed: {message}")

    def to_dict(self):
        return {
            "error": str(self),
            "operation": self.operation,
            "rolledBack": self.rolled_back,
        }


class SessionClosedError(SteelBillError):
    """The workspace is not open (logged out or timed out)."""

    status = 401
