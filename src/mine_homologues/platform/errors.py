"""Typed error model with problem+json responses."""

from enum import StrEnum

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mine_homologues.platform.types import JSONArray, JSONObject


class ErrorCode(StrEnum):
    """Application error codes."""

    # General
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Homology lookup
    GENE_NOT_FOUND = "GENE_NOT_FOUND"
    UNKNOWN_MINE = "UNKNOWN_MINE"
    MINE_SERVICE_ERROR = "MINE_SERVICE_ERROR"
    REGISTRY_ERROR = "REGISTRY_ERROR"


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str | None = None
    instance: str | None = None
    code: ErrorCode
    errors: JSONArray | None = None


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: ErrorCode,
        title: str,
        status: int = 400,
        detail: str | None = None,
        errors: JSONArray | None = None,
    ) -> None:
        self.code = code
        self.title = title
        self.status = status
        self.detail = detail
        self.errors = errors
        super().__init__(title)

    def to_problem(self, instance: str | None = None) -> ProblemDetail:
        """Build the problem+json payload for this error."""
        return ProblemDetail(
            type=f"https://registry.intermine.org/errors/{self.code.value}",
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=instance,
            code=self.code,
            errors=self.errors,
        )


class NotFoundError(AppError):
    """Resource not found error."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.NOT_FOUND,
        title: str = "Resource not found",
        detail: str | None = None,
    ) -> None:
        super().__init__(code=code, title=title, status=404, detail=detail)


class GeneNotFoundError(NotFoundError):
    """No gene record exists for the requested internal id."""

    def __init__(self, gene_id: int, service_root: str) -> None:
        self.gene_id = gene_id
        self.service_root = service_root
        super().__init__(
            code=ErrorCode.GENE_NOT_FOUND,
            title="Gene not found",
            detail=f"No gene with id {gene_id} on {service_root}",
        )


class UnknownMineError(NotFoundError):
    """The registry has no entry for a mine URL or namespace."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            code=ErrorCode.UNKNOWN_MINE,
            title="Unknown mine",
            detail=detail,
        )


class ValidationError(AppError):
    """Validation error."""

    def __init__(
        self,
        title: str = "Validation failed",
        detail: str | None = None,
        errors: JSONArray | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            title=title,
            status=422,
            detail=detail,
            errors=errors,
        )


class MineServiceError(AppError):
    """Error from a mine's query web service."""

    def __init__(self, detail: str, status: int = 502) -> None:
        super().__init__(
            code=ErrorCode.MINE_SERVICE_ERROR,
            title="Mine service error",
            status=status,
            detail=detail,
        )


class RegistryError(AppError):
    """Error from the InterMine registry."""

    def __init__(self, detail: str, status: int = 502) -> None:
        super().__init__(
            code=ErrorCode.REGISTRY_ERROR,
            title="Registry service error",
            status=status,
            detail=detail,
        )


def problem_payload(exc: AppError, instance: str | None = None) -> JSONObject:
    """Serialize an error as a problem+json body."""
    return exc.to_problem(instance).model_dump(mode="json", exclude_none=True)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle AppError exceptions."""
    return JSONResponse(
        status_code=exc.status,
        content=problem_payload(exc, str(request.url)),
        media_type="application/problem+json",
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPException."""
    code = ErrorCode.INTERNAL_ERROR
    if exc.status_code == 404:
        code = ErrorCode.NOT_FOUND
    elif exc.status_code == 422:
        code = ErrorCode.VALIDATION_ERROR

    problem = ProblemDetail(
        type=f"https://registry.intermine.org/errors/{code.value}",
        title=str(exc.detail),
        status=exc.status_code,
        instance=str(request.url),
        code=code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=problem.model_dump(exclude_none=True),
        media_type="application/problem+json",
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render query/body validation failures as a ValidationError problem."""
    errors: JSONArray = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": str(err.get("msg", "")),
        }
        for err in exc.errors()
    ]
    return await app_error_handler(
        request,
        ValidationError(detail="Invalid request parameters", errors=errors),
    )
