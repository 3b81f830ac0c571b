"""
Repositories wrapping the SQLAlchemy session for each record kind.
"""

from typing import Generic, TypeVar, List, Optional, Type, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from libraryapp.models import (
    Book,
    BookCategory,
    User,
    UserLoanHistory,
    UserLoanStatus,
)

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository providing common CRUD operations.

    Writes only flush; committing is left to the caller's transaction.
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize the repository.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def save(self, obj: T) -> T:
        self.db.add(obj)
        self.db.flush()
        return obj

    def save_all(self, objs: List[T]) -> List[T]:
        self.db.add_all(objs)
        self.db.flush()
        return objs

    def find_by_id(self, id: int) -> Optional[T]:
        return self.db.query(self.model).filter(self.model.id == id).first()

    def find_all(self) -> List[T]:
        return self.db.query(self.model).order_by(self.model.id).all()

    def delete(self, obj: T) -> None:
        self.db.delete(obj)
        self.db.flush()

    def delete_all(self) -> None:
        """
        Delete every record one by one so ORM cascades are applied.
        """
        for obj in self.db.query(self.model).all():
            self.db.delete(obj)
        self.db.flush()

    def count(self) -> int:
        return self.db.query(self.model).count()

    def exists_by_id(self, id: int) -> bool:
        return self.db.query(self.model).filter(self.model.id == id).count() > 0


class BookRepository(BaseRepository[Book]):
    def __init__(self, db: Session):
        super().__init__(db, Book)

    def find_by_name(self, name: str) -> Optional[Book]:
        return self.db.query(Book).filter(Book.name == name).first()

    def count_by_category(self) -> List[Tuple[BookCategory, int]]:
        """
        Count books grouped by category.

        Returns:
            (category, count) pairs for the categories present, in no
            particular order
        """
        rows = (
            self.db.query(Book.category, func.count(Book.id))
            .group_by(Book.category)
            .all()
        )
        return [(category, count) for category, count in rows]


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def find_by_name(self, name: str) -> Optional[User]:
        return self.db.query(User).filter(User.name == name).first()

    def exists_by_name(self, name: str) -> bool:
        return self.db.query(User).filter(User.name == name).count() > 0

    def find_all_with_histories(self) -> List[User]:
        return (
            self.db.query(User)
            .options(selectinload(User.user_loan_histories))
            .order_by(User.id)
            .all()
        )


class UserLoanHistoryRepository(BaseRepository[UserLoanHistory]):
    def __init__(self, db: Session):
        super().__init__(db, UserLoanHistory)

    def exists_by_book_name_and_status(
        self, book_name: str, status: UserLoanStatus
    ) -> bool:
        return (
            self.db.query(UserLoanHistory)
            .filter(
                UserLoanHistory.book_name == book_name,
                UserLoanHistory.status == status,
            )
            .count()
            > 0
        )

    def find_by_user_and_book_name_and_status(
        self, user: User, book_name: str, status: UserLoanStatus
    ) -> Optional[UserLoanHistory]:
        return (
            self.db.query(UserLoanHistory)
            .filter(
                UserLoanHistory.user_id == user.id,
                UserLoanHistory.book_name == book_name,
                UserLoanHistory.status == status,
            )
            .first()
        )

    def count_by_status(self, status: UserLoanStatus) -> int:
        return (
            self.db.query(UserLoanHistory)
            .filter(UserLoanHistory.status == status)
            .count()
        )
