from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger(__name__)


class LibraryException(Exception):
    """Base exception for library-related errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NotFoundError(LibraryException):
    """Raised when a referenced user or loan record does not exist."""

    pass


class ValidationError(LibraryException):
    """Raised when a business rule is violated."""

    pass


class UserNotFoundError(NotFoundError):
    def __init__(self, user_ref: int | str):
        self.user_ref = user_ref
        super().__init__(f"User {user_ref} not found")


class LoanHistoryNotFoundError(NotFoundError):
    def __init__(self, user_name: str, book_name: str):
        self.user_name = user_name
        self.book_name = book_name
        super().__init__(
            f"No outstanding loan of book '{book_name}' for user '{user_name}'"
        )


class BookAlreadyLoanedError(ValidationError):
    def __init__(self, book_name: str):
        self.book_name = book_name
        super().__init__(f"Book '{book_name}' is already loaned")


class InvalidBookError(ValidationError):
    def __init__(self, message: str):
        super().__init__(f"Invalid book data: {message}")


class InvalidUserError(ValidationError):
    def __init__(self, message: str):
        super().__init__(f"Invalid user data: {message}")


# Exception handlers
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.error(f"HTTP error {exc.status_code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Request validation error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": "Invalid request parameters. Please check your input."},
    )


async def response_validation_exception_handler(
    request: Request, exc: ResponseValidationError
):
    logger.error(f"Response validation error: {exc.errors()}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "The server encountered an unexpected error. Please contact support."
        },
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(
        f"Unexpected error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please contact support."},
    )


async def not_found_exception_handler(request: Request, exc: NotFoundError):
    logger.error(f"Not found: {exc}")
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc)},
    )


async def library_validation_exception_handler(request: Request, exc: ValidationError):
    logger.error(f"Rule violated: {exc}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


def add_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(
        ResponseValidationError, response_validation_exception_handler
    )
    app.add_exception_handler(Exception, general_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_exception_handler)
    app.add_exception_handler(ValidationError, library_validation_exception_handler)
