"""Article CRUD, listing filters and view counting."""
import pytest

from folio.articles.models import Article
from folio.comments.models import Comment
from folio.shared.database import SessionLocal
from folio.users.models import User

ARTICLES_URL = "/api/v1/articles"


@pytest.fixture
def post_article(client, category, auth_headers):
    def post(user, title="Hello World", **fields):
        payload = {"title": title, "content": f"Body of {title}", "categoryId": category.id, **fields}
        return client.post(ARTICLES_URL, json=payload, headers=auth_headers(user))

    return post


class TestCreateArticle:
    def test_register_create_and_filter_by_category(self, client, category, other_category):
        """Register alice, post "Hello World" in category 1, list that category."""
        registered = client.post(
            "/api/v1/users/register",
            json={"username": "alice", "email": "alice@x.com", "password": "Secret123!"},
        )
        token = registered.json()["data"]["token"]

        created = client.post(
            ARTICLES_URL,
            json={"title": "Hello World", "content": "First post", "categoryId": 1},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert created.status_code == 201

        response = client.get(ARTICLES_URL, params={"category": 1})
        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 1
        assert body["data"][0]["title"] == "Hello World"
        assert body["data"][0]["slug"] == "hello-world"

        assert client.get(ARTICLES_URL, params={"category": other_category.id}).json()["data"] == []

    def test_created_article_expands_relations(self, post_article, alice, tags):
        response = post_article(alice, tagIds=[tags[0].id, tags[1].id], excerpt="Short")
        assert response.status_code == 201
        article = response.json()["data"]

        assert article["status"] == "DRAFT"
        assert article["viewCount"] == 0
        assert article["publishedAt"] is None
        assert article["author"]["username"] == "alice"
        assert article["category"]["slug"] == "technology"
        assert sorted(t["slug"] for t in article["tags"]) == ["fastapi", "python"]

    def test_slug_collision_is_an_error(self, post_article, alice, bob):
        assert post_article(alice, title="Hello World").status_code == 201

        response = post_article(bob, title="hello,   WORLD!")
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "An article with this title already exists"}

    def test_title_without_slug_characters(self, post_article, alice):
        response = post_article(alice, title="!!!")
        assert response.status_code == 400

    def test_unknown_category(self, client, alice, auth_headers):
        response = client.post(
            ARTICLES_URL,
            json={"title": "Orphan", "content": "x", "categoryId": 999},
            headers=auth_headers(alice),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Category not found"

    def test_unknown_tag(self, post_article, alice, tags):
        response = post_article(alice, tagIds=[tags[0].id, 999])
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid tag IDs"

    def test_huge_category_and_tag_ids_are_validation_errors(self, client, alice, auth_headers, tags):
        for payload in (
            {"title": "Huge", "content": "x", "categoryId": 99999999999999999999},
            {"title": "Huge", "content": "x", "categoryId": 1, "tagIds": [2**31]},
        ):
            response = client.post(ARTICLES_URL, json=payload, headers=auth_headers(alice))
            assert response.status_code == 400
            assert response.json()["success"] is False

    def test_requires_token(self, client, category):
        response = client.post(ARTICLES_URL, json={"title": "x", "content": "y", "categoryId": category.id})
        assert response.status_code == 401


class TestReadArticle:
    def test_each_fetch_counts_as_a_view(self, client, post_article, alice):
        article_id = post_article(alice).json()["data"]["id"]

        counts = [client.get(f"{ARTICLES_URL}/{article_id}").json()["data"]["viewCount"] for _ in range(3)]
        assert counts == [1, 2, 3]

    def test_invalid_id(self, client):
        response = client.get(f"{ARTICLES_URL}/abc")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid article ID"

    def test_missing_article(self, client):
        response = client.get(f"{ARTICLES_URL}/4242")
        assert response.status_code == 404
        assert response.json()["error"] == "Article not found"

    @pytest.mark.parametrize("raw", ["99999999999999999999", "2147483648", "²"])
    def test_id_outside_integer_range(self, client, raw):
        response = client.get(f"{ARTICLES_URL}/{raw}")
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid article ID"}


class TestListArticles:
    def test_pagination_metadata_ignores_page_window(self, client, post_article, alice):
        for i in range(7):
            post_article(alice, title=f"Post {i}")

        for page in (1, 2, 3):
            body = client.get(ARTICLES_URL, params={"page": page, "limit": 3}).json()
            assert body["pagination"] == {"page": page, "limit": 3, "total": 7, "totalPages": 3}

        assert len(client.get(ARTICLES_URL, params={"page": 3, "limit": 3}).json()["data"]) == 1

    def test_newest_first(self, client, post_article, alice):
        post_article(alice, title="Older")
        post_article(alice, title="Newer")
        titles = [a["title"] for a in client.get(ARTICLES_URL).json()["data"]]
        assert titles == ["Newer", "Older"]

    def test_search_is_case_insensitive(self, client, post_article, alice):
        post_article(alice, title="Async Python")
        post_article(alice, title="Gardening", content="Mostly about PYTHON plants")
        post_article(alice, title="Cooking")

        body = client.get(ARTICLES_URL, params={"search": "python"}).json()
        assert body["pagination"]["total"] == 2

    def test_filter_by_tag_slug_and_id(self, client, post_article, alice, tags):
        post_article(alice, title="Tagged", tagIds=[tags[2].id])
        post_article(alice, title="Untagged")

        by_slug = client.get(ARTICLES_URL, params={"tag": "testing"}).json()["data"]
        by_id = client.get(ARTICLES_URL, params={"tag": tags[2].id}).json()["data"]
        assert [a["title"] for a in by_slug] == [a["title"] for a in by_id] == ["Tagged"]

    def test_filter_by_author_status_and_featured(self, client, post_article, alice, bob):
        post_article(alice, title="Alice draft")
        post_article(alice, title="Alice live", status="PUBLISHED", featured=True)
        post_article(bob, title="Bob live", status="PUBLISHED")

        def titles(**params):
            return sorted(a["title"] for a in client.get(ARTICLES_URL, params=params).json()["data"])

        assert titles(author="alice") == ["Alice draft", "Alice live"]
        assert titles(author=bob.id) == ["Bob live"]
        assert titles(status="PUBLISHED") == ["Alice live", "Bob live"]
        assert titles(featured="true") == ["Alice live"]

    def test_author_me_uses_optional_token(self, client, post_article, alice, bob, auth_headers):
        post_article(alice, title="Mine")
        post_article(bob, title="Theirs")

        mine = client.get(ARTICLES_URL, params={"author": "me"}, headers=auth_headers(alice)).json()
        assert [a["title"] for a in mine["data"]] == ["Mine"]

        anonymous = client.get(ARTICLES_URL, params={"author": "me"})
        assert anonymous.status_code == 200
        assert anonymous.json()["data"] == []

        bad_token = client.get(ARTICLES_URL, headers={"Authorization": "Bearer garbage"})
        assert bad_token.status_code == 200
        assert bad_token.json()["pagination"]["total"] == 2

    def test_limit_out_of_range(self, client):
        response = client.get(ARTICLES_URL, params={"limit": 500})
        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.parametrize("param", ["category", "tag", "author"])
    @pytest.mark.parametrize("value", ["²", "٣", "99999999999999999999"])
    def test_non_ascii_digits_and_huge_ids_match_nothing(self, client, post_article, alice, tags, param, value):
        post_article(alice, tagIds=[tags[0].id])

        response = client.get(ARTICLES_URL, params={param: value})
        assert response.status_code == 200
        assert response.json()["data"] == []


class TestUpdateArticle:
    def test_partial_update_leaves_other_fields(self, client, post_article, alice, auth_headers):
        created = post_article(alice, excerpt="Keep me").json()["data"]

        response = client.put(
            f"{ARTICLES_URL}/{created['id']}",
            json={"featured": True, "status": "PUBLISHED"},
            headers=auth_headers(alice),
        )
        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["featured"] is True
        assert updated["status"] == "PUBLISHED"
        assert updated["title"] == created["title"]
        assert updated["slug"] == created["slug"]
        assert updated["content"] == created["content"]
        assert updated["excerpt"] == "Keep me"
        # Publishing does not stamp a timestamp on its own
        assert updated["publishedAt"] is None

    def test_status_changes_are_unrestricted(self, client, post_article, alice, auth_headers):
        article_id = post_article(alice, status="ARCHIVED").json()["data"]["id"]
        response = client.put(f"{ARTICLES_URL}/{article_id}", json={"status": "DRAFT"}, headers=auth_headers(alice))
        assert response.json()["data"]["status"] == "DRAFT"

    def test_title_change_rederives_slug(self, client, post_article, alice, auth_headers):
        article_id = post_article(alice).json()["data"]["id"]
        response = client.put(f"{ARTICLES_URL}/{article_id}", json={"title": "Goodbye  World"}, headers=auth_headers(alice))
        assert response.json()["data"]["slug"] == "goodbye-world"

    def test_retitling_onto_existing_slug(self, client, post_article, alice, auth_headers):
        post_article(alice, title="Taken")
        article_id = post_article(alice, title="Free").json()["data"]["id"]
        response = client.put(f"{ARTICLES_URL}/{article_id}", json={"title": "TAKEN"}, headers=auth_headers(alice))
        assert response.status_code == 400

    def test_keeping_own_title_is_not_a_conflict(self, client, post_article, alice, auth_headers):
        article_id = post_article(alice).json()["data"]["id"]
        response = client.put(f"{ARTICLES_URL}/{article_id}", json={"title": "Hello World"}, headers=auth_headers(alice))
        assert response.status_code == 200

    def test_tag_ids_replace_the_whole_set(self, client, post_article, alice, auth_headers, tags):
        article_id = post_article(alice, tagIds=[tags[0].id, tags[1].id]).json()["data"]["id"]

        response = client.put(
            f"{ARTICLES_URL}/{article_id}",
            json={"tagIds": [tags[1].id, tags[2].id]},
            headers=auth_headers(alice),
        )
        assert sorted(t["slug"] for t in response.json()["data"]["tags"]) == ["fastapi", "testing"]

        cleared = client.put(f"{ARTICLES_URL}/{article_id}", json={"tagIds": []}, headers=auth_headers(alice))
        assert cleared.json()["data"]["tags"] == []

    def test_non_owner_forbidden(self, client, post_article, alice, bob, auth_headers):
        article_id = post_article(alice).json()["data"]["id"]
        response = client.put(f"{ARTICLES_URL}/{article_id}", json={"title": "Mine now"}, headers=auth_headers(bob))
        assert response.status_code == 403
        assert response.json()["error"] == "You can only update your own articles"


class TestDeleteArticle:
    def test_owner_deletes(self, client, post_article, alice, auth_headers, tags):
        article_id = post_article(alice, tagIds=[tags[0].id]).json()["data"]["id"]

        response = client.delete(f"{ARTICLES_URL}/{article_id}", headers=auth_headers(alice))
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": None, "message": "Article deleted successfully"}
        assert client.get(f"{ARTICLES_URL}/{article_id}").status_code == 404
        # Tags themselves survive
        assert len(client.get("/api/v1/tags").json()["data"]) == 3

    def test_non_owner_forbidden(self, client, post_article, alice, bob, auth_headers):
        article_id = post_article(alice).json()["data"]["id"]
        response = client.delete(f"{ARTICLES_URL}/{article_id}", headers=auth_headers(bob))
        assert response.status_code == 403
        assert response.json()["error"] == "You can only delete your own articles"


def test_deleting_user_cascades_to_content(client, post_article, alice, bob, auth_headers):
    article_id = post_article(alice).json()["data"]["id"]
    client.post(
        "/api/v1/projects",
        json={"title": "Alice project", "description": "x"},
        headers=auth_headers(alice),
    )
    client.post(f"{ARTICLES_URL}/{article_id}/comments", json={"content": "Self-review"}, headers=auth_headers(alice))
    bob_article_id = post_article(bob, title="Bob post").json()["data"]["id"]
    client.post(f"{ARTICLES_URL}/{bob_article_id}/comments", json={"content": "Nice"}, headers=auth_headers(alice))

    session = SessionLocal()
    try:
        session.delete(session.get(User, alice.id))
        session.commit()

        assert session.query(Article).filter(Article.author_id == alice.id).count() == 0
        assert session.query(Comment).filter(Comment.author_id == alice.id).count() == 0
    finally:
        session.close()

    assert client.get(f"{ARTICLES_URL}/{article_id}").status_code == 404
    assert client.get("/api/v1/projects").json()["pagination"]["total"] == 0
    assert client.get(f"{ARTICLES_URL}/{bob_article_id}").status_code == 200
