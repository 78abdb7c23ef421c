import uuid

import pytest

from app.core.errors import AuthorizationError, ConflictError, NotFoundError
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.services.product_service import ProductService
from app.services.review_service import ReviewService

API = "/api/v1"


@pytest.fixture
def review_service():
    return ReviewService(ReviewRepository(), ProductRepository())


def _review(rating=5, comment="Great"):
    return ReviewCreate(rating=rating, comment=comment)


def test_create_review(session, review_service, make_user, make_product):
    user = make_user(name="alice")
    product = make_product()

    review = review_service.create_review(
        session, user, product.id, _review(4, "  Solid build  ")
    )

    assert review.product_id == product.id
    assert review.username == "alice"
    assert review.rating == 4
    assert review.comment == "Solid build"
    assert review.verified is False
    assert review.helpful == 0


def test_one_review_per_user_and_product(session, review_service, make_user, make_product):
    user = make_user()
    product = make_product()
    review_service.create_review(session, user, product.id, _review())

    with pytest.raises(ConflictError) as exc:
        review_service.create_review(session, user, product.id, _review(1, "Changed"))
    assert exc.value.message == "You have already reviewed this product"

    # other users and other products are unaffected
    review_service.create_review(session, make_user(), product.id, _review())
    review_service.create_review(session, user, make_product().id, _review())


def test_review_unknown_product(session, review_service, make_user):
    with pytest.raises(NotFoundError):
        review_service.create_review(session, make_user(), uuid.uuid4(), _review())
    with pytest.raises(NotFoundError):
        review_service.list_product_reviews(session, uuid.uuid4())


def test_only_author_updates(session, review_service, make_user, make_product):
    author = make_user()
    admin = make_user(role="admin")
    review = review_service.create_review(session, author, make_product().id, _review())

    with pytest.raises(NotFoundError):
        review_service.update_review(session, make_user(), review.id, ReviewUpdate(rating=1))
    with pytest.raises(NotFoundError):
        review_service.update_review(session, admin, review.id, ReviewUpdate(rating=1))

    updated = review_service.update_review(
        session, author, review.id, ReviewUpdate(comment="Even better")
    )
    assert updated.rating == 5
    assert updated.comment == "Even better"
    assert updated.updated_at >= review.updated_at


def test_delete_by_author_or_admin(session, review_service, make_user, make_product):
    author = make_user()
    admin = make_user(role="admin")
    product = make_product()
    mine = review_service.create_review(session, author, product.id, _review())
    theirs = review_service.create_review(session, make_user(), product.id, _review())

    with pytest.raises(AuthorizationError):
        review_service.delete_review(session, author, theirs.id)

    review_service.delete_review(session, author, mine.id)
    review_service.delete_review(session, admin, theirs.id)
    assert review_service.list_product_reviews(session, product.id).reviews == []

    with pytest.raises(NotFoundError):
        review_service.delete_review(session, admin, mine.id)


def test_listing_sorts_and_paginates(session, review_service, make_user, make_product):
    product = make_product()
    for rating in (3, 5, 1):
        review_service.create_review(session, make_user(), product.id, _review(rating))

    page = review_service.list_product_reviews(
        session, product.id, page=1, limit=2, sort_by="rating", descending=True
    )
    assert [r.rating for r in page.reviews] == [5, 3]
    assert page.pagination.total_reviews == 3
    assert page.pagination.total_pages == 2
    assert page.pagination.has_next is True

    rest = review_service.list_product_reviews(
        session, product.id, page=2, limit=2, sort_by="rating", descending=True
    )
    assert [r.rating for r in rest.reviews] == [1]
    assert rest.pagination.has_prev is True


def test_list_my_reviews(session, review_service, make_user, make_product):
    user = make_user()
    review_service.create_review(session, user, make_product().id, _review())
    review_service.create_review(session, user, make_product().id, _review())
    review_service.create_review(session, make_user(), make_product().id, _review())

    mine = review_service.list_my_reviews(session, user)
    assert mine.pagination.total_reviews == 2
    assert len(mine.reviews) == 2


def test_review_endpoints(client, auth_headers, make_product):
    product = make_product()
    alice = auth_headers("alice")
    url = f"{API}/products/{product.id}/reviews"

    resp = client.post(url, json={"rating": 5, "comment": "Lovely"}, headers=alice)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    review = body["review"]
    assert review["productId"] == str(product.id)
    assert "createdAt" in review
    assert "userId" not in review

    resp = client.post(url, json={"rating": 4, "comment": "Again"}, headers=alice)
    assert resp.status_code == 409
    assert resp.json() == {
        "success": False,
        "message": "You have already reviewed this product",
    }

    listed = client.get(url).json()
    assert [r["id"] for r in listed["reviews"]] == [review["id"]]
    assert listed["pagination"]["totalReviews"] == 1

    mine = client.get(f"{API}/products/user/reviews", headers=alice).json()
    assert [r["id"] for r in mine["reviews"]] == [review["id"]]

    resp = client.put(
        f"{API}/products/reviews/{review['id']}",
        json={"rating": 3},
        headers=auth_headers("bob"),
    )
    assert resp.status_code == 404

    resp = client.put(
        f"{API}/products/reviews/{review['id']}", json={"rating": 3}, headers=alice
    )
    assert resp.status_code == 200
    assert resp.json()["review"]["rating"] == 3

    resp = client.delete(
        f"{API}/products/reviews/{review['id']}", headers=auth_headers("bob")
    )
    assert resp.status_code == 403

    resp = client.delete(
        f"{API}/products/reviews/{review['id']}",
        headers=auth_headers("root", role="admin"),
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Review deleted successfully"


@pytest.mark.parametrize(
    "body",
    [
        {"rating": 0, "comment": "Bad"},
        {"rating": 6, "comment": "Too good"},
        {"rating": 4, "comment": "   "},
        {"rating": 4, "comment": "x" * 501},
        {"rating": 4},
    ],
)
def test_invalid_review_payloads(client, auth_headers, make_product, body):
    product = make_product()
    resp = client.post(
        f"{API}/products/{product.id}/reviews", json=body, headers=auth_headers("alice")
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_posting_review_requires_token(client, make_product):
    product = make_product()
    resp = client.post(
        f"{API}/products/{product.id}/reviews", json={"rating": 5, "comment": "Hi"}
    )
    assert resp.status_code == 401


def test_reviewed_product_cannot_be_deleted(session, review_service, make_user, make_product):
    product = make_product()
    review_service.create_review(session, make_user(), product.id, _review())

    with pytest.raises(ConflictError):
        ProductService(ProductRepository()).delete_product(
            session, make_user(role="admin"), product.id
        )


def test_listing_query_params(client, auth_headers, make_product):
    product = make_product()
    url = f"{API}/products/{product.id}/reviews"
    client.post(url, json={"rating": 2, "comment": "Meh"}, headers=auth_headers("alice"))
    client.post(url, json={"rating": 4, "comment": "Good"}, headers=auth_headers("bob"))

    resp = client.get(url, params={"sortBy": "rating", "sortOrder": "asc"})
    assert [r["rating"] for r in resp.json()["reviews"]] == [2, 4]

    assert client.get(url, params={"sortBy": "username"}).status_code == 400
    assert client.get(f"{API}/products/{uuid.uuid4()}/reviews").status_code == 404
