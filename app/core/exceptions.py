from typing import Any, Optional


class AppError(Exception):
    """Error translated into a JSON body ``{error, details?, status?, hint?}``."""

    status_code = 500

    def __init__(
        self,
        error: str,
        *,
        hint: Optional[str] = None,
        details: Any = None,
        upstream_status: Optional[int] = None,
    ):
        self.error = error
        self.hint = hint
        self.details = details
        self.upstream_status = upstream_status
        super().__init__(error)

    def to_dict(self) -> dict:
        body: dict = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        if self.upstream_status is not None:
            body["status"] = self.upstream_status
        if self.hint is not None:
            body["hint"] = self.hint
        return body


class InvalidRequestError(AppError):
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401

    def __init__(self, error: str = "Unauthorized", **kwargs):
        super().__init__(error, **kwargs)


class ConfigurationError(AppError):
    status_code = 500


class UpstreamError(AppError):
    status_code = 500


class RepositoryError(UpstreamError):
    pass
