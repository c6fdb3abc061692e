"""Tests for the post feature.
Covers: PostService, post CRUD endpoints, filtering, auth protection, post_created events.
"""

import pytest
from fastapi import status

from src.config.settings import settings
from src.features.post.exceptions import InvalidPostAuthor
from src.features.post.schemas import PostCreateRequest, PostUpdateRequest
from src.features.post.service import PostService
from src.features.realtime.hub import GLOBAL_NOTIFICATIONS, Connection
from src.shared.pagination.pagination import PaginationParams


class RecordingSocket:
    def __init__(self):
        self.sent: list[dict] = []

    async def send_json(self, data, mode="text"):
        self.sent.append(data)


# PostService Unit Tests


class TestPostService:
    async def test_create_post_defaults_author_to_caller(self, session, alice):
        post = await PostService.create_post(session, PostCreateRequest(title=" Hi ", content=" There "), alice)

        assert post.author_id == alice.id
        assert post.author.email == "alice@example.com"
        assert post.title == "Hi"
        assert post.content == "There"
        assert post.published is False

    async def test_create_post_for_other_author(self, session, alice, bob):
        data = PostCreateRequest(title="On behalf", content="Body", author_id=bob.id, published=True)
        post = await PostService.create_post(session, data, alice)

        assert post.author_id == bob.id
        assert post.published is True

    async def test_create_post_unknown_author(self, session, alice):
        with pytest.raises(InvalidPostAuthor):
            await PostService.create_post(session, PostCreateRequest(title="T", content="C", author_id=9999), alice)

    async def test_get_posts_filters(self, session, alice, bob):
        posts, total = await PostService.get_posts(session, PaginationParams(), published=True)
        assert total == 1
        assert posts[0].author_id == alice.id

        posts, total = await PostService.get_posts(session, PaginationParams(), author_id=bob.id)
        assert total == 1
        assert posts[0].title == "API Development"

    async def test_update_keeps_published_when_omitted(self, session, alice):
        post = await PostService.create_post(
            session, PostCreateRequest(title="T", content="C", published=True), alice
        )
        updated = await PostService.update_post(session, post, PostUpdateRequest(title="T2", content="C2"))

        assert updated.title == "T2"
        assert updated.published is True

    async def test_delete_missing_post(self, session):
        assert await PostService.delete_post(session, 9999) is False


# Post API Endpoint Tests (HTTP Layer)


class TestPostEndpointList:
    async def test_list_posts(self, client):
        response = await client.get(f"{settings.api_prefix}/posts")
        assert response.status_code == status.HTTP_200_OK
        body = response.json()

        assert body["pagination"]["total"] == 2
        post = body["items"][0]
        assert set(post) == {"id", "title", "content", "author_id", "published", "created_at", "updated_at", "author"}
        assert set(post["author"]) == {"id", "name", "email"}

    async def test_list_posts_newest_first(self, client, alice, auth_headers):
        created = await client.post(
            f"{settings.api_prefix}/posts",
            json={"title": "Fresh", "content": "Newest post"},
            headers=auth_headers(alice),
        )

        response = await client.get(f"{settings.api_prefix}/posts")
        assert response.json()["items"][0]["id"] == created.json()["id"]

    async def test_filter_by_published(self, client):
        response = await client.get(f"{settings.api_prefix}/posts", params={"published": "false"})
        items = response.json()["items"]
        assert [p["title"] for p in items] == ["API Development"]

    async def test_filter_by_author(self, client, alice):
        response = await client.get(f"{settings.api_prefix}/posts", params={"authorId": alice.id})
        items = response.json()["items"]
        assert len(items) == 1
        assert items[0]["author"]["name"] == "Alice Johnson"


class TestPostEndpointGet:
    async def test_get_post(self, client):
        listing = await client.get(f"{settings.api_prefix}/posts")
        post_id = listing.json()["items"][0]["id"]

        response = await client.get(f"{settings.api_prefix}/posts/{post_id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == post_id

    async def test_get_post_not_found(self, client):
        response = await client.get(f"{settings.api_prefix}/posts/9999")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Post not found"}


class TestPostEndpointCreate:
    async def test_create_post(self, client, bob, auth_headers):
        response = await client.post(
            f"{settings.api_prefix}/posts",
            json={"title": "Announcement", "content": "Hello everyone", "published": True},
            headers=auth_headers(bob),
        )
        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["title"] == "Announcement"
        assert body["published"] is True
        assert body["author"] == {"id": bob.id, "name": "Bob Smith", "email": "bob@example.com"}

    async def test_create_post_requires_auth(self, client):
        response = await client.post(f"{settings.api_prefix}/posts", json={"title": "T", "content": "C"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_create_post_validation(self, client, alice, auth_headers):
        response = await client.post(
            f"{settings.api_prefix}/posts",
            json={"title": "   ", "author_id": "seven"},
            headers=auth_headers(alice),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["error"] == "Validation failed"
        assert set(body["errors"]) == {"Title is required", "Content is required", "Valid author_id is required"}

    async def test_create_post_unknown_author(self, client, alice, auth_headers):
        response = await client.post(
            f"{settings.api_prefix}/posts",
            json={"title": "T", "content": "C", "author_id": 9999},
            headers=auth_headers(alice),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Validation failed", "errors": ["Valid author_id is required"]}

    async def test_create_post_publishes_notification(self, client, alice, auth_headers, hub):
        listener = Connection(websocket=RecordingSocket())
        hub.subscribe(listener, GLOBAL_NOTIFICATIONS)

        response = await client.post(
            f"{settings.api_prefix}/posts",
            json={"title": "Realtime", "content": "Everyone should hear this"},
            headers=auth_headers(alice),
        )

        assert response.status_code == status.HTTP_201_CREATED
        events = listener.websocket.sent
        assert len(events) == 1
        assert events[0]["type"] == "post_created"
        assert events[0]["post"]["id"] == response.json()["id"]


class TestPostEndpointUpdate:
    async def test_update_post(self, client, alice, bob, auth_headers):
        listing = await client.get(f"{settings.api_prefix}/posts", params={"authorId": alice.id})
        post_id = listing.json()["items"][0]["id"]

        # Any authenticated user may edit any post
        response = await client.put(
            f"{settings.api_prefix}/posts/{post_id}",
            json={"title": "Edited", "content": "Edited by Bob", "published": False},
            headers=auth_headers(bob),
        )
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["title"] == "Edited"
        assert body["published"] is False
        assert body["author_id"] == alice.id

    async def test_update_post_not_found(self, client, alice, auth_headers):
        response = await client.put(
            f"{settings.api_prefix}/posts/9999",
            json={"title": "T", "content": "C"},
            headers=auth_headers(alice),
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_update_post_requires_auth(self, client):
        response = await client.put(f"{settings.api_prefix}/posts/1", json={"title": "T", "content": "C"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestPostEndpointDelete:
    async def test_delete_post(self, client, alice, auth_headers):
        listing = await client.get(f"{settings.api_prefix}/posts")
        post_id = listing.json()["items"][0]["id"]

        response = await client.delete(f"{settings.api_prefix}/posts/{post_id}", headers=auth_headers(alice))
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Post deleted successfully"}

        follow_up = await client.get(f"{settings.api_prefix}/posts/{post_id}")
        assert follow_up.status_code == status.HTTP_404_NOT_FOUND

    async def test_delete_post_not_found(self, client, alice, auth_headers):
        response = await client.delete(f"{settings.api_prefix}/posts/9999", headers=auth_headers(alice))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_delete_post_requires_auth(self, client):
        response = await client.delete(f"{settings.api_prefix}/posts/1")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
