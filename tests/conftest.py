"""Shared fixtures: file-backed SQLite database, seeded users/products, API client."""

import os
import tempfile

_TEST_DB_DIR = tempfile.mkdtemp(prefix="marketplace-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB_DIR}/test.db"
os.environ["DEBUG"] = "false"
os.environ["WS_REQUIRE_SESSION"] = "false"

import pytest
from fastapi.testclient import TestClient

from marketplace.chat.service import ChatService
from marketplace.core.database import Base, SessionLocal, engine
from marketplace.core.dependencies import validate_session
from marketplace.model import Block, ChatRoom, Product, User


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def chat_service():
    return ChatService(SessionLocal)


@pytest.fixture
def seed(db):
    """Buyer (id 1), seller (id 2), outsider (id 3), and a product sold by the seller."""
    buyer = User(username="buyer", nickname="Buyer")
    seller = User(username="seller", nickname="Seller")
    outsider = User(username="outsider", nickname="Outsider")
    db.add_all([buyer, seller, outsider])
    db.commit()
    product = Product(title="Road bike", price=120000, status="on_sale", seller_id=seller.id)
    db.add(product)
    db.commit()
    return {
        "buyer": buyer.id,
        "seller": seller.id,
        "outsider": outsider.id,
        "product": product.id,
    }


@pytest.fixture
def room(db, seed):
    chat_room = ChatRoom(buyer_id=seed["buyer"], seller_id=seed["seller"], product_id=seed["product"])
    db.add(chat_room)
    db.commit()
    return chat_room


@pytest.fixture
def block(db):
    """block(blocker_id, blocked_id) inserts a block row."""
    def _block(blocker_id: int, blocked_id: int) -> Block:
        row = Block(blocker_id=blocker_id, blocked_user_id=blocked_id)
        db.add(row)
        db.commit()
        return row
    return _block


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """act_as(user_id) makes subsequent API requests run as that user."""
    from main import app

    def _act_as(user_id: int) -> None:
        app.dependency_overrides[validate_session] = lambda: {"user_id": user_id}

    yield _act_as
    app.dependency_overrides.clear()

