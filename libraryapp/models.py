import enum

from sqlalchemy import Column, Integer, String, Enum, ForeignKey
from sqlalchemy.orm import relationship

from sqlalchemy.orm import declarative_base

Base = declarative_base()


class BookCategory(str, enum.Enum):
    COMPUTER = "COMPUTER"
    ECONOMY = "ECONOMY"
    SOCIETY = "SOCIETY"
    LANGUAGE = "LANGUAGE"
    SCIENCE = "SCIENCE"


class UserLoanStatus(str, enum.Enum):
    LOANED = "LOANED"
    RETURNED = "RETURNED"


class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(Enum(BookCategory), nullable=False)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    age = Column(Integer, nullable=True)

    def loan_book(self, book_name: str) -> "UserLoanHistory":
        history = UserLoanHistory(book_name=book_name, status=UserLoanStatus.LOANED)
        self.user_loan_histories.append(history)
        return history


class UserLoanHistory(Base):
    __tablename__ = "user_loan_histories"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    # Linked to Book by name only, so a history outlives the book row.
    book_name = Column(String, nullable=False, index=True)
    status = Column(Enum(UserLoanStatus), nullable=False, default=UserLoanStatus.LOANED)

    user = relationship("User", back_populates="user_loan_histories")

    @property
    def is_return(self) -> bool:
        return self.status == UserLoanStatus.RETURNED

    def do_return(self):
        self.status = UserLoanStatus.RETURNED


User.user_loan_histories = relationship(
    "UserLoanHistory",
    back_populates="user",
    cascade="all, delete-orphan",
    order_by=UserLoanHistory.id,
)
