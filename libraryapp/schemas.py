from pydantic import BaseModel, Field
from typing import List, Optional

from libraryapp.models import BookCategory, User, UserLoanHistory


class BookRequest(BaseModel):
    name: str = Field(min_length=1)
    category: BookCategory


class BookLoanRequest(BaseModel):
    user_name: str
    book_name: str


class BookReturnRequest(BaseModel):
    user_name: str
    book_name: str


class BookSchema(BaseModel):
    id: int
    name: str
    category: BookCategory

    class Config:
        from_attributes = True


class BookStatResponse(BaseModel):
    category: BookCategory
    count: int


class UserCreateRequest(BaseModel):
    name: str
    age: Optional[int] = None


class UserUpdateRequest(BaseModel):
    """Only the fields present in the request are applied; age may be set to null."""

    id: int
    name: Optional[str] = None
    age: Optional[int] = None


class UserResponse(BaseModel):
    id: int
    name: str
    age: Optional[int] = None

    class Config:
        from_attributes = True


class BookHistoryResponse(BaseModel):
    name: str
    is_return: bool

    @classmethod
    def of(cls, history: UserLoanHistory) -> "BookHistoryResponse":
        return cls(name=history.book_name, is_return=history.is_return)


class UserLoanHistoryResponse(BaseModel):
    name: str
    books: List[BookHistoryResponse] = []

    @classmethod
    def of(cls, user: User) -> "UserLoanHistoryResponse":
        return cls(
            name=user.name,
            books=[BookHistoryResponse.of(h) for h in user.user_loan_histories],
        )
