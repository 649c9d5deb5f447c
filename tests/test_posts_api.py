"""Posts, likes, comments and image upload behind the bearer token gate."""
import pytest
from fastapi import status

from minifacebook.core.errors import ImageStorageError


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com", name="Alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", name="Bob")


def create_post(client, headers, content="hello world", **extra):
    r = client.post("/api/posts", json={"content": content, **extra}, headers=headers)
    assert r.status_code == status.HTTP_201_CREATED, r.text
    return r.json()


class TestPosts:
    def test_create_requires_token(self, client):
        r = client.post("/api/posts", json={"content": "hi"})
        assert r.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create(self, client, alice):
        headers, alice_id = alice
        post = create_post(client, headers, imageUrl="https://blob.example.com/images/cat.png")
        assert post["authorId"] == alice_id
        assert post["authorName"] == "Alice"
        assert post["content"] == "hello world"
        assert post["imageUrl"] == "https://blob.example.com/images/cat.png"
        assert post["likeCount"] == 0
        assert post["commentCount"] == 0
        assert post["likedByMe"] is False

    def test_empty_content_rejected(self, client, alice):
        headers, _ = alice
        r = client.post("/api/posts", json={"content": "   "}, headers=headers)
        assert r.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_newest_first_and_paginated(self, client, alice):
        headers, _ = alice
        ids = [create_post(client, headers, content=f"post {i}")["postId"] for i in range(3)]

        r = client.get("/api/posts", params={"page": 1, "size": 2})
        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 3
        assert [p["postId"] for p in body["data"]] == [ids[2], ids[1]]

        r = client.get("/api/posts", params={"page": 2, "size": 2})
        assert [p["postId"] for p in r.json()["data"]] == [ids[0]]

    def test_list_with_invalid_token_is_401(self, client):
        r = client.get("/api/posts", headers={"Authorization": "Bearer nope"})
        assert r.status_code == status.HTTP_401_UNAUTHORIZED

    def test_get_missing_post(self, client):
        r = client.get("/api/posts/999")
        assert r.status_code == status.HTTP_404_NOT_FOUND
        assert r.json()["error"] == "post_not_found"

    def test_only_author_can_delete(self, client, alice, bob):
        alice_headers, _ = alice
        bob_headers, _ = bob
        post_id = create_post(client, alice_headers)["postId"]

        r = client.delete(f"/api/posts/{post_id}", headers=bob_headers)
        assert r.status_code == status.HTTP_403_FORBIDDEN

        r = client.delete(f"/api/posts/{post_id}", headers=alice_headers)
        assert r.status_code == 200
        assert r.json() == {"postId": post_id}
        assert client.get(f"/api/posts/{post_id}").status_code == 404


class TestLikes:
    def test_like_and_unlike(self, client, alice, bob):
        alice_headers, _ = alice
        bob_headers, _ = bob
        post_id = create_post(client, alice_headers)["postId"]

        r = client.put(f"/api/posts/{post_id}/like", json={"liked": True}, headers=bob_headers)
        assert r.status_code == 200
        assert r.json() == {"postId": post_id, "liked": True, "likeCount": 1}

        # liking twice does not double count
        r = client.put(f"/api/posts/{post_id}/like", json={"liked": True}, headers=bob_headers)
        assert r.json()["likeCount"] == 1

        r = client.put(f"/api/posts/{post_id}/like", json={"liked": True}, headers=alice_headers)
        assert r.json()["likeCount"] == 2

        post = client.get(f"/api/posts/{post_id}", headers=bob_headers).json()
        assert post["likeCount"] == 2
        assert post["likedByMe"] is True

        r = client.put(f"/api/posts/{post_id}/like", json={"liked": False}, headers=bob_headers)
        assert r.json() == {"postId": post_id, "liked": False, "likeCount": 1}

        post = client.get(f"/api/posts/{post_id}", headers=bob_headers).json()
        assert post["likedByMe"] is False

    def test_unlike_without_like_is_noop(self, client, alice):
        headers, _ = alice
        post_id = create_post(client, headers)["postId"]
        r = client.put(f"/api/posts/{post_id}/like", json={"liked": False}, headers=headers)
        assert r.json()["likeCount"] == 0

    def test_like_requires_token(self, client, alice):
        headers, _ = alice
        post_id = create_post(client, headers)["postId"]
        r = client.put(f"/api/posts/{post_id}/like", json={"liked": True})
        assert r.status_code == status.HTTP_401_UNAUTHORIZED

    def test_like_missing_post(self, client, alice):
        headers, _ = alice
        r = client.put("/api/posts/999/like", json={"liked": True}, headers=headers)
        assert r.status_code == status.HTTP_404_NOT_FOUND


class TestComments:
    def test_add_and_list_oldest_first(self, client, alice, bob):
        alice_headers, _ = alice
        bob_headers, bob_id = bob
        post_id = create_post(client, alice_headers)["postId"]

        first = client.post(f"/api/posts/{post_id}/comments", json={"content": "first!"}, headers=bob_headers)
        assert first.status_code == status.HTTP_201_CREATED
        assert first.json()["authorId"] == bob_id
        assert first.json()["authorName"] == "Bob"
        client.post(f"/api/posts/{post_id}/comments", json={"content": "thanks"}, headers=alice_headers)

        r = client.get(f"/api/posts/{post_id}/comments")
        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 2
        assert [c["content"] for c in body["data"]] == ["first!", "thanks"]

        post = client.get(f"/api/posts/{post_id}").json()
        assert post["commentCount"] == 2

    def test_comment_on_missing_post(self, client, alice):
        headers, _ = alice
        r = client.post("/api/posts/999/comments", json={"content": "hi"}, headers=headers)
        assert r.status_code == status.HTTP_404_NOT_FOUND
        assert client.get("/api/posts/999/comments").status_code == 404

    def test_only_author_can_delete_comment(self, client, alice, bob):
        alice_headers, _ = alice
        bob_headers, _ = bob
        post_id = create_post(client, alice_headers)["postId"]
        comment_id = client.post(
            f"/api/posts/{post_id}/comments", json={"content": "mine"}, headers=bob_headers
        ).json()["commentId"]

        r = client.delete(f"/api/posts/{post_id}/comments/{comment_id}", headers=alice_headers)
        assert r.status_code == status.HTTP_403_FORBIDDEN

        r = client.delete(f"/api/posts/{post_id}/comments/{comment_id}", headers=bob_headers)
        assert r.status_code == 200
        assert r.json() == {"commentId": comment_id}
        assert client.get(f"/api/posts/{post_id}/comments").json()["total"] == 0

    def test_deleting_post_removes_comments_and_likes(self, client, alice, bob):
        alice_headers, _ = alice
        bob_headers, _ = bob
        post_id = create_post(client, alice_headers)["postId"]
        client.post(f"/api/posts/{post_id}/comments", json={"content": "x"}, headers=bob_headers)
        client.put(f"/api/posts/{post_id}/like", json={"liked": True}, headers=bob_headers)

        assert client.delete(f"/api/posts/{post_id}", headers=alice_headers).status_code == 200

        new_id = create_post(client, alice_headers)["postId"]
        post = client.get(f"/api/posts/{new_id}").json()
        assert post["likeCount"] == 0
        assert post["commentCount"] == 0


class TestImageUpload:
    def test_upload(self, client, app, alice):
        headers, _ = alice
        files = {"image": ("cat.png", b"\x89PNG fake", "image/png")}
        r = client.post("/api/image", files=files, headers=headers)
        assert r.status_code == 200
        assert r.json()["imageUrl"].startswith("https://blob.example.com/images/")
        assert app.state.image_uploader.uploads == [(b"\x89PNG fake", "cat.png", "image/png")]

    def test_requires_token(self, client):
        files = {"image": ("cat.png", b"data", "image/png")}
        assert client.post("/api/image", files=files).status_code == 401

    def test_rejects_non_images(self, client, alice):
        headers, _ = alice
        files = {"image": ("notes.txt", b"hello", "text/plain")}
        r = client.post("/api/image", files=files, headers=headers)
        assert r.status_code == 400
        assert r.json()["error"] == "unsupported_media_type"

    def test_rejects_large_images(self, client, alice):
        headers, _ = alice
        files = {"image": ("big.png", b"x" * 2048, "image/png")}
        r = client.post("/api/image", files=files, headers=headers)
        assert r.status_code == 400
        assert r.json()["error"] == "image_too_large"

    def test_storage_failure_is_502(self, client, app, alice):
        headers, _ = alice

        class Broken:
            def upload(self, data, filename, content_type=None):
                raise ImageStorageError()

        app.state.image_uploader = Broken()
        files = {"image": ("cat.png", b"data", "image/png")}
        r = client.post("/api/image", files=files, headers=headers)
        assert r.status_code == 502
        assert r.json()["error"] == "image_storage_unavailable"
