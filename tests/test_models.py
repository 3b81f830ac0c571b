from sqlalchemy.orm import Session

from libraryapp.models import Book, BookCategory, User, UserLoanHistory, UserLoanStatus
from libraryapp.repositories import BookRepository, UserLoanHistoryRepository, UserRepository


def test_book_model(db_session: Session, book_fixture):
    book = book_fixture()
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)

    assert book.id is not None
    assert book.name == "Alice in Wonderland"
    assert book.category == BookCategory.COMPUTER


def test_user_loan_book(db_session: Session, test_user: User):
    history = test_user.loan_book("Dune")
    db_session.commit()

    assert history.user_id == test_user.id
    assert history.status == UserLoanStatus.LOANED
    assert history.is_return is False

    history.do_return()
    db_session.commit()

    assert history.is_return is True
    assert db_session.query(UserLoanHistory).count() == 1


def test_loan_history_survives_book_deletion(db_session: Session, test_user: User, book_fixture):
    book = book_fixture("Dune")
    db_session.add(book)
    test_user.loan_book("Dune")
    db_session.commit()

    db_session.delete(book)
    db_session.commit()

    assert db_session.query(Book).count() == 0
    assert db_session.query(UserLoanHistory).one().book_name == "Dune"


def test_repository_bulk_cleanup(db_session: Session, test_user: User, book_fixture):
    books = BookRepository(db_session)
    users = UserRepository(db_session)
    histories = UserLoanHistoryRepository(db_session)

    books.save_all([book_fixture("A"), book_fixture("B", BookCategory.SCIENCE)])
    test_user.loan_book("A")
    db_session.commit()

    assert books.count() == 2
    assert books.find_by_name("B").category == BookCategory.SCIENCE
    assert users.exists_by_name("Jeonguk")
    assert histories.exists_by_book_name_and_status("A", UserLoanStatus.LOANED)

    books.delete_all()
    users.delete_all()
    db_session.commit()

    assert books.count() == 0
    assert users.count() == 0
    assert histories.count() == 0


def test_repository_lookups_by_id(db_session: Session, test_user: User, book_fixture):
    books = BookRepository(db_session)
    users = UserRepository(db_session)

    book = books.save(book_fixture("Dune", BookCategory.SCIENCE))
    db_session.commit()

    assert books.exists_by_id(book.id)
    assert not books.exists_by_id(book.id + 1)
    assert users.exists_by_id(test_user.id)
    assert books.find_by_id(book.id).name == "Dune"
    assert books.find_by_id(book.id + 1) is None
    assert [b.name for b in books.find_all()] == ["Dune"]
