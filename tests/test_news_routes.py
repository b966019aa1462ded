"""
Pressroom Backend: News Endpoint Tests
======================================

What:  Both feeds (/news and /news-en) against the in-memory FakeStorage.

What we test:
    ✅ No image → image_url is null and /image/{id} is 404
    ✅ With image → image_url from storage, bytes retrievable via /image/{id}
    ✅ The two feeds are separate (ids from one are 404 in the other)
    ✅ PUT without an image keeps the old one; PUT with one replaces and cleans up
    ✅ Delete removes the stored image
    ✅ Writes need a token, any authenticated user may edit (no ownership)
    ✅ Non-image uploads and storage failures are reported
"""

import uuid

import pytest


def _image(content, name="photo.png", content_type="image/png"):
    return {"image": (name, content, content_type)}


class TestNewsCreate:

    @pytest.mark.asyncio
    async def test_create_without_image(self, test_client, auth_headers):
        response = await test_client.post(
            "/news",
            data={"title": "Hola", "description": "Primera noticia"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["image_url"] is None
        assert body["locale"] == "es"

        image = await test_client.get(f"/news/image/{body['id']}")
        assert image.status_code == 404

    @pytest.mark.asyncio
    async def test_create_with_image_bytes_retrievable(self, test_client, auth_headers, fake_storage, sample_image_bytes):
        response = await test_client.post(
            "/news",
            data={"title": "Hola", "description": "Con foto"},
            files=_image(sample_image_bytes),
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["image_url"].startswith("https://cdn.test/")
        assert len(fake_storage.objects) == 1

        image = await test_client.get(f"/news/image/{body['id']}")
        assert image.status_code == 200
        assert image.content == sample_image_bytes
        assert image.headers["content-type"] == "image/png"

    @pytest.mark.asyncio
    async def test_create_requires_token(self, test_client):
        response = await test_client.post("/news", data={"title": "t", "description": "d"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_requires_title_and_description(self, test_client, auth_headers):
        response = await test_client.post("/news", data={"title": "t"}, headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_image_upload_rejected(self, test_client, auth_headers, fake_storage):
        response = await test_client.post(
            "/news",
            data={"title": "t", "description": "d"},
            files=_image(b"plain text", name="notes.txt", content_type="text/plain"),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert fake_storage.objects == {}

    @pytest.mark.asyncio
    async def test_storage_failure_is_500_with_message(self, test_client, auth_headers, fake_storage, sample_image_bytes):
        fake_storage.fail_uploads = True

        response = await test_client.post(
            "/news",
            data={"title": "t", "description": "d"},
            files=_image(sample_image_bytes),
            headers=auth_headers,
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Upload rejected by object store"
        assert (await test_client.get("/news")).json() == []


class TestNewsLocales:

    @pytest.mark.asyncio
    async def test_feeds_are_separate(self, test_client, auth_headers):
        es = (await test_client.post("/news", data={"title": "Hola", "description": "es"}, headers=auth_headers)).json()
        en = (await test_client.post("/news-en", data={"title": "Hello", "description": "en"}, headers=auth_headers)).json()

        assert [n["title"] for n in (await test_client.get("/news")).json()] == ["Hola"]
        assert [n["title"] for n in (await test_client.get("/news-en")).json()] == ["Hello"]
        assert en["locale"] == "en"

        assert (await test_client.get(f"/news-en/{es['id']}")).status_code == 404
        assert (await test_client.get(f"/news/{en['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_english_image_route(self, test_client, auth_headers, sample_image_bytes):
        created = await test_client.post(
            "/news-en",
            data={"title": "Hello", "description": "pic"},
            files=_image(sample_image_bytes),
            headers=auth_headers,
        )
        image = await test_client.get(f"/news-en/image/{created.json()['id']}")
        assert image.content == sample_image_bytes


class TestNewsUpdateDelete:

    @pytest.mark.asyncio
    async def test_update_without_image_keeps_old_one(self, test_client, auth_headers, sample_image_bytes):
        created = (await test_client.post(
            "/news",
            data={"title": "Hola", "description": "d"},
            files=_image(sample_image_bytes),
            headers=auth_headers,
        )).json()

        response = await test_client.put(
            f"/news/{created['id']}",
            data={"title": "Hola de nuevo"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Hola de nuevo"
        assert body["description"] == "d"
        assert body["image_url"] == created["image_url"]

    @pytest.mark.asyncio
    async def test_update_with_image_replaces_and_cleans_up(self, test_client, auth_headers, fake_storage, sample_image_bytes):
        created = (await test_client.post(
            "/news",
            data={"title": "Hola", "description": "d"},
            files=_image(sample_image_bytes, name="old.png"),
            headers=auth_headers,
        )).json()
        old_key = next(iter(fake_storage.objects))

        response = await test_client.put(
            f"/news/{created['id']}",
            files=_image(sample_image_bytes + b"v2", name="new.png"),
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["image_url"] != created["image_url"]
        assert old_key in fake_storage.deleted
        image = await test_client.get(f"/news/image/{created['id']}")
        assert image.content == sample_image_bytes + b"v2"

    @pytest.mark.asyncio
    async def test_any_authenticated_user_may_edit(self, test_client, auth_headers, login_as):
        created = (await test_client.post("/news", data={"title": "t", "description": "d"}, headers=auth_headers)).json()
        other = await login_as("bob")

        response = await test_client.put(f"/news/{created['id']}", data={"description": "by bob"}, headers=other)

        assert response.status_code == 200
        assert response.json()["description"] == "by bob"

    @pytest.mark.asyncio
    async def test_update_unknown_news(self, test_client, auth_headers):
        response = await test_client.put(f"/news/{uuid.uuid4()}", data={"title": "x"}, headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_removes_row_and_image(self, test_client, auth_headers, fake_storage, sample_image_bytes):
        created = (await test_client.post(
            "/news",
            data={"title": "t", "description": "d"},
            files=_image(sample_image_bytes),
            headers=auth_headers,
        )).json()

        response = await test_client.delete(f"/news/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert fake_storage.objects == {}
        assert (await test_client.get(f"/news/{created['id']}")).status_code == 404
        assert (await test_client.get("/news")).json() == []

    @pytest.mark.asyncio
    async def test_delete_requires_token(self, test_client, auth_headers):
        created = (await test_client.post("/news", data={"title": "t", "description": "d"}, headers=auth_headers)).json()
        response = await test_client.delete(f"/news/{created['id']}")
        assert response.status_code == 401
