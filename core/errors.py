"""Gateway error taxonomy. Each maps to an HTTP status and a non-leaking JSON body."""


class GatewayError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, detail: str | None = None):
        # detail is for logs only, never for the response body
        self.detail = detail
        super().__init__(detail or self.message)

    def to_response_body(self) -> dict:
        return {"error": self.message}


class MissingKey(GatewayError):
    status_code = 400
    message = "Missing key"


class InvalidKeyFormat(GatewayError):
    status_code = 400
    message = "Invalid key format"


class InvalidCursor(GatewayError):
    status_code = 400
    message = "Invalid cursor"


class AssetNotFound(GatewayError):
    status_code = 404
    message = "Asset not found"


class StoreUnavailable(GatewayError):
    status_code = 503
    message = "Asset store unavailable"


class ServeFailed(GatewayError):
    status_code = 500
    message = "Failed to serve asset"
