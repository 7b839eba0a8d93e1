import itertools
import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from aqupark.core_settings import Settings
from aqupark.domain.models import CartLine, Product, User
from aqupark.infrastructure.security import create_access_token, hash_password
from aqupark.main import create_app

PASSWORD = "ValidPassword123!"
PASSWORD_HASH = hash_password(PASSWORD)

_emails = itertools.count(1)

@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", JWT_SECRET="test-secret", LOG_LEVEL="WARNING")

@pytest.fixture
def app(settings):
    return create_app(settings)

@pytest.fixture
def client(app):
    # entering the client runs the lifespan, which creates the tables
    with TestClient(app) as test_client:
        yield test_client

@pytest.fixture
def session_factory(app, client):
    return app.state.db.SessionLocal

@pytest.fixture
def make_user(session_factory):
    def _make(user_id=None, admin=False, email=None):
        with session_factory() as s:
            user = User(
                id=user_id,
                admin=admin,
                user_name=f"user-{user_id or 'x'}",
                email=email or f"user{next(_emails)}@example.com",
                tel="0900000000",
                password=PASSWORD_HASH,
            )
            s.add(user)
            s.commit()
            return user.id
    return _make

@pytest.fixture
def make_product(session_factory):
    def _make(product_id=None, price="100", sale_price=None, title=None, sell=True, img_urls=None):
        with session_factory() as s:
            product = Product(
                id=product_id,
                title=title or f"Product {product_id}",
                price=Decimal(price),
                sale_price=Decimal(sale_price) if sale_price is not None else None,
                img_urls=img_urls,
                sell=sell,
            )
            s.add(product)
            s.commit()
            return product.id
    return _make

@pytest.fixture
def put_in_cart(session_factory):
    def _put(user_id, product_id, qty):
        with session_factory() as s:
            s.add(CartLine(user_id=user_id, product_id=product_id, qty=qty))
            s.commit()
    return _put

@pytest.fixture
def auth_headers(settings):
    def _headers(user_id):
        token = create_access_token(user_id, settings.JWT_SECRET, settings.JWT_ALG)
        return {"Authorization": f"Bearer {token}"}
    return _headers

@pytest.fixture
def scenario_cart(make_user, make_product, put_in_cart):
    """User 7 holds product 3 x2 at 100 and product 5 x1 at 50; user 8 exists too."""
    make_user(7)
    make_user(8)
    make_product(3, price="100", img_urls="/uploads/products/3.png")
    make_product(5, price="50")
    put_in_cart(7, 3, 2)
    put_in_cart(7, 5, 1)
