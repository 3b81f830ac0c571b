import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from libraryapp import schemas
from libraryapp.exceptions import (
    BookAlreadyLoanedError,
    InvalidBookError,
    InvalidUserError,
    LoanHistoryNotFoundError,
    UserNotFoundError,
)
from libraryapp.models import Book, User, UserLoanHistory, UserLoanStatus
from libraryapp.repositories import (
    BookRepository,
    UserLoanHistoryRepository,
    UserRepository,
)
from libraryapp.storage import transaction

logger = logging.getLogger(__name__)


def _validate_user_fields(name: Optional[str], age: Optional[int]):
    if name is None or not name.strip():
        raise InvalidUserError("name must not be blank")
    if age is not None and age < 0:
        raise InvalidUserError(f"age must not be negative, got {age}")


class BookService:
    def __init__(self, db: Session):
        self.db = db
        self.book_repository = BookRepository(db)
        self.user_repository = UserRepository(db)
        self.user_loan_history_repository = UserLoanHistoryRepository(db)

    def save_book(self, request: schemas.BookRequest) -> Book:
        if not request.name or not request.name.strip():
            raise InvalidBookError("name must not be blank")
        with transaction(self.db):
            book = self.book_repository.save(
                Book(name=request.name, category=request.category)
            )
        logger.info(f"Registered book '{book.name}' ({book.category.value})")
        return book

    def loan_book(self, request: schemas.BookLoanRequest) -> UserLoanHistory:
        with transaction(self.db):
            user = self.user_repository.find_by_name(request.user_name)
            if user is None:
                raise UserNotFoundError(request.user_name)
            if self.user_loan_history_repository.exists_by_book_name_and_status(
                request.book_name, UserLoanStatus.LOANED
            ):
                raise BookAlreadyLoanedError(request.book_name)
            history = user.loan_book(request.book_name)
            self.db.flush()
        logger.info(f"User '{request.user_name}' loaned book '{request.book_name}'")
        return history

    def return_book(self, request: schemas.BookReturnRequest) -> UserLoanHistory:
        with transaction(self.db):
            user = self.user_repository.find_by_name(request.user_name)
            if user is None:
                raise UserNotFoundError(request.user_name)
            history = self.user_loan_history_repository.find_by_user_and_book_name_and_status(
                user, request.book_name, UserLoanStatus.LOANED
            )
            if history is None:
                raise LoanHistoryNotFoundError(request.user_name, request.book_name)
            history.do_return()
        logger.info(f"User '{request.user_name}' returned book '{request.book_name}'")
        return history

    def count_loaned_book(self) -> int:
        return self.user_loan_history_repository.count_by_status(UserLoanStatus.LOANED)

    def get_book_statistics(self) -> List[schemas.BookStatResponse]:
        return [
            schemas.BookStatResponse(category=category, count=count)
            for category, count in self.book_repository.count_by_category()
        ]


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.user_repository = UserRepository(db)

    def save_user(self, request: schemas.UserCreateRequest) -> User:
        _validate_user_fields(request.name, request.age)
        with transaction(self.db):
            user = self.user_repository.save(User(name=request.name, age=request.age))
        logger.info(f"Registered user '{user.name}' with id {user.id}")
        return user

    def get_users(self) -> List[schemas.UserResponse]:
        return [
            schemas.UserResponse.model_validate(user)
            for user in self.user_repository.find_all()
        ]

    def update_user(self, request: schemas.UserUpdateRequest) -> User:
        update_data = request.model_dump(exclude_unset=True)
        update_data.pop("id", None)
        with transaction(self.db):
            user = self.user_repository.find_by_id(request.id)
            if user is None:
                raise UserNotFoundError(request.id)
            _validate_user_fields(
                update_data.get("name", user.name), update_data.get("age", user.age)
            )
            for key, value in update_data.items():
                setattr(user, key, value)
            self.db.flush()
        logger.info(f"Updated user {user.id}: {update_data}")
        return user

    def delete_user(self, name: str):
        with transaction(self.db):
            user = self.user_repository.find_by_name(name)
            if user is None:
                raise UserNotFoundError(name)
            self.user_repository.delete(user)
        logger.info(f"Deleted user '{name}'")

    def get_user_loan_history(self, name: str) -> schemas.UserLoanHistoryResponse:
        user = self.user_repository.find_by_name(name)
        if user is None:
            raise UserNotFoundError(name)
        return schemas.UserLoanHistoryResponse.of(user)

    def get_user_loan_histories(self) -> List[schemas.UserLoanHistoryResponse]:
        return [
            schemas.UserLoanHistoryResponse.of(user)
            for user in self.user_repository.find_all_with_histories()
        ]
