import pytest

from sitecms import db
from sitecms.models import Blog


def create_blog(client, headers, **fields):
    body = {"title": "Hello", "slug": "hello"}
    body.update(fields)
    response = client.post("/api/blogs", headers=headers, json=body)
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


def test_create_defaults_to_draft(client, admin_headers):
    blog = create_blog(client, admin_headers)
    assert blog["status"] == "draft"
    assert blog["published_at"] is None
    assert blog["author"]["username"] == "admin"
    assert blog["view_count"] == 0


def test_create_published_sets_timestamp(client, admin_headers):
    blog = create_blog(client, admin_headers, status="published")
    assert blog["status"] == "published"
    assert blog["published_at"] is not None


def test_create_validates_input(client, admin_headers):
    assert client.post("/api/blogs", headers=admin_headers, json={"title": "x"}).status_code == 400
    assert client.post("/api/blogs", headers=admin_headers, json={"slug": "x"}).status_code == 400
    response = client.post("/api/blogs", headers=admin_headers, json={"title": "x", "slug": "x", "status": "archived"})
    assert response.status_code == 400


def test_duplicate_slug_conflicts(client, admin_headers):
    create_blog(client, admin_headers)
    response = client.post("/api/blogs", headers=admin_headers, json={"title": "Again", "slug": "hello"})
    assert response.status_code == 409


def test_publish_lifecycle(client, admin_headers):
    blog = create_blog(client, admin_headers)
    url = f"/api/blogs/{blog['id']}"

    published = client.put(url, headers=admin_headers, json={"title": "Hello", "slug": "hello", "status": "published"})
    first_published_at = published.get_json()["data"]["published_at"]
    assert first_published_at is not None

    again = client.put(url, headers=admin_headers, json={"title": "Hello!", "slug": "hello", "status": "published"})
    assert again.get_json()["data"]["published_at"] == first_published_at

    draft = client.put(url, headers=admin_headers, json={"title": "Hello!", "slug": "hello", "status": "draft"})
    data = draft.get_json()["data"]
    assert data["status"] == "draft"
    assert data["published_at"] == first_published_at


def test_update_overwrites_whole_record(client, admin_headers):
    blog = create_blog(client, admin_headers, excerpt="short", content="long")
    response = client.put(f"/api/blogs/{blog['id']}", headers=admin_headers, json={"title": "New", "slug": "new"})
    data = response.get_json()["data"]
    assert data["title"] == "New"
    assert data["excerpt"] is None
    assert data["content"] is None


def test_get_unknown_blog(client, admin_headers):
    assert client.get("/api/blogs/999", headers=admin_headers).status_code == 404
    assert client.put("/api/blogs/999", headers=admin_headers, json={"title": "a", "slug": "a"}).status_code == 404


def test_soft_delete(app, client, admin_headers):
    blog = create_blog(client, admin_headers, status="published")
    assert client.delete(f"/api/blogs/{blog['id']}", headers=admin_headers).status_code == 200

    assert client.get(f"/api/blogs/{blog['id']}", headers=admin_headers).status_code == 404
    assert client.get("/api/blogs", headers=admin_headers).get_json()["data"] == []
    assert client.get("/api/public/blogs/hello").status_code == 404
    assert client.delete(f"/api/blogs/{blog['id']}", headers=admin_headers).status_code == 404

    with app.app_context():
        row = db.session.get(Blog, blog["id"])
        assert row is not None
        assert row.deleted_at is not None


def test_list_filters(client, admin_headers):
    category = client.post(
        "/api/blog-categories", headers=admin_headers, json={"name": "News", "slug": "news"}
    ).get_json()["data"]
    create_blog(client, admin_headers, title="Python tips", slug="python", category_id=category["id"])
    create_blog(client, admin_headers, title="Gardening", slug="garden", excerpt="about PYTHONS", status="published")
    create_blog(client, admin_headers, title="Cooking", slug="cooking")

    def slugs(query):
        response = client.get(f"/api/blogs{query}", headers=admin_headers)
        return {b["slug"] for b in response.get_json()["data"]}

    assert slugs("") == {"python", "garden", "cooking"}
    assert slugs("?status=published") == {"garden"}
    assert slugs(f"?category_id={category['id']}") == {"python"}
    assert slugs("?search=python") == {"python", "garden"}
    assert client.get("/api/blogs?category_id=abc", headers=admin_headers).status_code == 400


def test_tags_assignment(client, admin_headers):
    tag_a = client.post("/api/blog-tags", headers=admin_headers, json={"name": "A", "slug": "a"}).get_json()["data"]
    tag_b = client.post("/api/blog-tags", headers=admin_headers, json={"name": "B", "slug": "b"}).get_json()["data"]

    blog = create_blog(client, admin_headers, tag_ids=[tag_a["id"]])
    assert [t["slug"] for t in blog["tags"]] == ["a"]

    url = f"/api/blogs/{blog['id']}"
    kept = client.put(url, headers=admin_headers, json={"title": "Hello", "slug": "hello"}).get_json()["data"]
    assert [t["slug"] for t in kept["tags"]] == ["a"]

    replaced = client.put(
        url, headers=admin_headers, json={"title": "Hello", "slug": "hello", "tag_ids": [tag_b["id"]]}
    ).get_json()["data"]
    assert [t["slug"] for t in replaced["tags"]] == ["b"]

    client.delete(f"/api/blog-tags/{tag_b['id']}", headers=admin_headers)
    assert client.get(url, headers=admin_headers).get_json()["data"]["tags"] == []


def test_category_crud(client, admin_headers):
    created = client.post(
        "/api/blog-categories", headers=admin_headers, json={"name": "News", "slug": "news", "description": "d"}
    )
    assert created.status_code == 201
    category_id = created.get_json()["data"]["id"]

    updated = client.put(f"/api/blog-categories/{category_id}", headers=admin_headers, json={"name": "Updates"})
    data = updated.get_json()["data"]
    assert data["name"] == "Updates"
    assert data["slug"] == "news"
    assert data["description"] is None

    assert client.get(f"/api/blog-categories/{category_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/blog-categories/{category_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/blog-categories/{category_id}", headers=admin_headers).status_code == 404
    assert client.post("/api/blog-categories", headers=admin_headers, json={"name": "x"}).status_code == 400


class TestPublicBlogs:
    def test_only_published_are_listed(self, client, admin_headers):
        create_blog(client, admin_headers, slug="draft-post")
        create_blog(client, admin_headers, slug="live-post", status="published")

        body = client.get("/api/public/blogs").get_json()
        assert [b["slug"] for b in body["data"]] == ["live-post"]
        assert body["total"] == 1
        assert body["page"] == 1
        assert body["limit"] == 10

    def test_draft_slug_is_not_found(self, client, admin_headers):
        create_blog(client, admin_headers, slug="draft-post")
        assert client.get("/api/public/blogs/draft-post").status_code == 404

    def test_slug_lookup_counts_views(self, client, admin_headers):
        created = create_blog(client, admin_headers, slug="live-post", status="published")
        client.get("/api/public/blogs/live-post")
        response = client.get("/api/public/blogs/live-post")
        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["view_count"] == 2
        assert data["updated_at"] == created["updated_at"]

    def test_pagination(self, client, admin_headers):
        for i in range(12):
            create_blog(client, admin_headers, title=f"Post {i}", slug=f"post-{i}", status="published")

        first = client.get("/api/public/blogs?page=1&limit=5").get_json()
        assert len(first["data"]) == 5
        assert first["total"] == 12

        last = client.get("/api/public/blogs?page=3&limit=5").get_json()
        assert len(last["data"]) == 2

        everything = [b["slug"] for p in (1, 2, 3) for b in client.get(f"/api/public/blogs?page={p}&limit=5").get_json()["data"]]
        assert len(set(everything)) == 12

    @pytest.mark.parametrize("query,expected_page,expected_limit", [
        ("?limit=0", 1, 10),
        ("?limit=51", 1, 10),
        ("?limit=50", 1, 50),
        ("?page=-3", 1, 10),
        ("?page=abc&limit=xyz", 1, 10),
    ])
    def test_pagination_bounds(self, client, query, expected_page, expected_limit):
        body = client.get(f"/api/public/blogs{query}").get_json()
        assert body["page"] == expected_page
        assert body["limit"] == expected_limit

    def test_category_and_tag_filters(self, client, admin_headers):
        category = client.post(
            "/api/blog-categories", headers=admin_headers, json={"name": "News", "slug": "news"}
        ).get_json()["data"]
        tag = client.post("/api/blog-tags", headers=admin_headers, json={"name": "Py", "slug": "py"}).get_json()["data"]
        create_blog(client, admin_headers, slug="in-news", status="published", category_id=category["id"])
        create_blog(client, admin_headers, slug="tagged", status="published", tag_ids=[tag["id"]])

        by_category = client.get("/api/public/blogs?category=news").get_json()
        assert [b["slug"] for b in by_category["data"]] == ["in-news"]

        by_tag = client.get("/api/public/blogs?tag=py").get_json()
        assert [b["slug"] for b in by_tag["data"]] == ["tagged"]
        assert by_tag["total"] == 1

        unknown = client.get("/api/public/blogs?category=missing").get_json()
        assert unknown["total"] == 2

    def test_public_categories_and_tags(self, client, admin_headers):
        client.post("/api/blog-categories", headers=admin_headers, json={"name": "News", "slug": "news"})
        client.post("/api/blog-tags", headers=admin_headers, json={"name": "Py", "slug": "py"})
        assert [c["slug"] for c in client.get("/api/public/blog-categories").get_json()["data"]] == ["news"]
        assert [t["slug"] for t in client.get("/api/public/blog-tags").get_json()["data"]] == ["py"]
