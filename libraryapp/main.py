import os
import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, Response, status
from sqlalchemy.orm import Session

from libraryapp.exceptions import add_exception_handlers
from libraryapp.schemas import (
    BookLoanRequest,
    BookRequest,
    BookReturnRequest,
    BookSchema,
    BookStatResponse,
    UserCreateRequest,
    UserLoanHistoryResponse,
    UserResponse,
    UserUpdateRequest,
)
from libraryapp.services import BookService, UserService
from libraryapp.storage import get_db, init_db

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.testing = app.state.testing if hasattr(app.state, "testing") else False

    if not app.state.testing:
        logger.info("Initializing database")
        init_db()
    yield


app = FastAPI(
    title="Library App API",
    lifespan=lifespan,
    description="Book registration, loans and returns for library users",
    version="1.0.0",
)

add_exception_handlers(app)


def get_book_service(db: Session = Depends(get_db)) -> BookService:
    return BookService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


# Books
@app.post("/book", response_model=BookSchema, status_code=status.HTTP_201_CREATED)
def save_book(request: BookRequest, service: BookService = Depends(get_book_service)):
    logger.info(f"Received request to register book: {request.name}")
    return service.save_book(request)


@app.post("/book/loan", status_code=status.HTTP_200_OK)
def loan_book(
    request: BookLoanRequest, service: BookService = Depends(get_book_service)
):
    service.loan_book(request)


@app.put("/book/return", status_code=status.HTTP_200_OK)
def return_book(
    request: BookReturnRequest, service: BookService = Depends(get_book_service)
):
    service.return_book(request)


@app.get("/book/loan", response_model=int)
def count_loaned_book(service: BookService = Depends(get_book_service)):
    return service.count_loaned_book()


@app.get("/book/stat", response_model=List[BookStatResponse])
def get_book_statistics(service: BookService = Depends(get_book_service)):
    return service.get_book_statistics()


# Users
@app.post("/user", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def save_user(
    request: UserCreateRequest, service: UserService = Depends(get_user_service)
):
    return service.save_user(request)


@app.get("/user", response_model=List[UserResponse])
def get_users(service: UserService = Depends(get_user_service)):
    return service.get_users()


@app.put("/user", response_model=UserResponse)
def update_user(
    request: UserUpdateRequest, service: UserService = Depends(get_user_service)
):
    return service.update_user(request)


@app.delete("/user", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(name: str, service: UserService = Depends(get_user_service)):
    service.delete_user(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/user/loan", response_model=List[UserLoanHistoryResponse])
def get_user_loan_histories(service: UserService = Depends(get_user_service)):
    return service.get_user_loan_histories()


@app.get("/user/loan/{name}", response_model=UserLoanHistoryResponse)
def get_user_loan_history(name: str, service: UserService = Depends(get_user_service)):
    return service.get_user_loan_history(name)


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("LIBRARY_HOST", "0.0.0.0")
    port = int(os.getenv("LIBRARY_PORT", "8000"))
    print(f"Starting library server on {host}:{port}")
    uvicorn.run(app, host=host, port=port)
