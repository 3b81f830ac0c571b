import os
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from dotenv import load_dotenv

from libraryapp.main import app
from libraryapp.models import (
    Base,
    Book,
    BookCategory,
    User,
    UserLoanHistory,
    UserLoanStatus,
)
from libraryapp.storage import get_db

load_dotenv()

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DB_URL", "sqlite://")

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def book_fixture():
    def make_book(
        name: str = "Alice in Wonderland",
        category: BookCategory = BookCategory.COMPUTER,
    ) -> Book:
        return Book(name=name, category=category)

    return make_book


@pytest.fixture
def loan_history_fixture():
    def make_loan_history(
        user: User,
        book_name: str = "Alice in Wonderland",
        status: UserLoanStatus = UserLoanStatus.LOANED,
    ) -> UserLoanHistory:
        return UserLoanHistory(user=user, book_name=book_name, status=status)

    return make_loan_history


@pytest.fixture(scope="function")
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    app.state.testing = True

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.testing = False


@pytest.fixture(scope="function")
def test_user(db_session):
    user = User(name="Jeonguk", age=33)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user
