"""API endpoint tests"""
import uuid

import pytest

from vidtube.models.like import Like
from vidtube.models.user import User
from vidtube.models.video import Video


def register(client, user_name="alice", email="a@x.com", password="p1", full_name="Alice", avatar=True, cover=False):
    files = {}
    if avatar:
        files["avatar"] = ("avatar.png", b"\x89PNG avatar-bytes", "image/png")
    if cover:
        files["coverImage"] = ("cover.jpg", b"cover-bytes", "image/jpeg")
    data = {"userName": user_name, "email": email, "password": password, "fullName": full_name}
    return client.post("/api/v1/users/register", data=data, files=files or None)


def upload_video(client, headers, title="My video", description="About it"):
    return client.post(
        "/api/v1/videos",
        data={"title": title, "description": description},
        files={
            "videoFile": ("clip.mp4", b"fake-mp4-bytes", "video/mp4"),
            "thumbnail": ("thumb.png", b"fake-png-bytes", "image/png"),
        },
        headers=headers,
    )


@pytest.mark.critical
class TestEndToEndScenario:
    """Register, login, cross-user ownership check and like toggle"""

    def test_full_flow(self, client, db_session, auth_headers, test_user_2):
        # Register A
        response = register(client)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["statusCode"] == 201
        user_data = body["data"]
        assert user_data["userName"] == "alice"
        assert "password" not in user_data
        assert "passwordHash" not in user_data
        assert "refreshToken" not in user_data

        # Wrong password: 401 and no tokens
        response = client.post("/api/v1/users/login", json={"userName": "alice", "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["success"] is False
        assert "accessToken" not in response.cookies
        assert "refreshToken" not in response.cookies
        stored = db_session.query(User).filter(User.user_name == "alice").first()
        assert stored.refresh_token_hash is None

        # Correct password: 200, both cookies, user without secrets
        response = client.post("/api/v1/users/login", json={"userName": "alice", "password": "p1"})
        assert response.status_code == 200
        assert response.cookies.get("accessToken")
        assert response.cookies.get("refreshToken")
        data = response.json()["data"]
        assert data["user"]["email"] == "a@x.com"
        assert "password" not in data["user"]
        assert "refreshToken" not in data["user"]

        # Act as A through the cookie
        response = upload_video(client, headers={})
        assert response.status_code == 201
        video_id = response.json()["data"]["id"]
        assert response.json()["data"]["owner"]["userName"] == "alice"

        # B acts through a bearer token, so drop A's cookies first
        client.cookies.clear()
        b_headers = auth_headers(test_user_2)

        response = client.patch(
            f"/api/v1/videos/{video_id}",
            data={"title": "Hijacked", "description": "nope"},
            headers=b_headers,
        )
        assert response.status_code == 403
        assert response.json()["success"] is False

        response = client.post(f"/api/v1/likes/toggle/v/{video_id}", headers=b_headers)
        assert response.status_code == 200
        first = response.json()["data"]
        assert first["isLiked"] is True
        assert first["like"]["video"] == video_id

        response = client.post(f"/api/v1/likes/toggle/v/{video_id}", headers=b_headers)
        assert response.status_code == 200
        assert response.json()["data"] == {"isLiked": False}
        assert db_session.query(Like).count() == 0


@pytest.mark.critical
class TestRegistration:

    def test_duplicate_handle_returns_409_and_creates_nothing(self, client, db_session, media_host):
        assert register(client).status_code == 201
        uploads_before = len(media_host.uploaded)

        response = register(client, email="other@x.com")
        assert response.status_code == 409
        assert db_session.query(User).count() == 1
        # Rejected before any media was uploaded
        assert len(media_host.uploaded) == uploads_before

    def test_duplicate_email_returns_409(self, client, db_session):
        assert register(client).status_code == 201
        response = register(client, user_name="alice2", email="A@X.com")
        assert response.status_code == 409
        assert db_session.query(User).count() == 1

    def test_handle_is_stored_lower_cased(self, client):
        response = register(client, user_name="  AliceW ")
        assert response.status_code == 201
        assert response.json()["data"]["userName"] == "alicew"

    def test_blank_field_returns_400(self, client, db_session):
        response = register(client, full_name="   ")
        assert response.status_code == 400
        assert response.json()["message"] == "All fields are required!"
        assert db_session.query(User).count() == 0

    def test_missing_avatar_returns_400(self, client, db_session):
        response = register(client, avatar=False)
        assert response.status_code == 400
        assert db_session.query(User).count() == 0

    def test_cover_image_is_optional_but_stored(self, client):
        response = register(client, cover=True)
        assert response.status_code == 201
        assert response.json()["data"]["coverImage"].startswith("https://media.test/covers/")

    def test_media_host_failure_returns_500(self, client, db_session, media_host):
        media_host.fail_uploads = True
        response = register(client)
        assert response.status_code == 500
        assert response.json()["message"] == "Avatar upload failed!"
        assert db_session.query(User).count() == 0


@pytest.mark.critical
class TestSession:

    def test_login_by_email(self, client, test_user):
        response = client.post("/api/v1/users/login", json={"email": "alice@example.com", "password": "TestPassword123!"})
        assert response.status_code == 200

    def test_login_without_identifier_returns_400(self, client):
        response = client.post("/api/v1/users/login", json={"password": "x"})
        assert response.status_code == 400

    def test_login_unknown_user_returns_404(self, client):
        response = client.post("/api/v1/users/login", json={"userName": "ghost", "password": "x"})
        assert response.status_code == 404

    def test_protected_route_requires_auth(self, client):
        response = client.get("/api/v1/users/current-user")
        assert response.status_code == 401
        body = response.json()
        assert body == {"statusCode": 401, "message": "Unauthorized request", "success": False}

    def test_current_user_via_cookie(self, authenticated_client, test_user):
        response = authenticated_client.get("/api/v1/users/current-user")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == test_user.id

    def test_refresh_rotates_and_old_token_fails(self, authenticated_client):
        old_refresh = authenticated_client.cookies.get("refreshToken")

        response = authenticated_client.post("/api/v1/users/refresh-token")
        assert response.status_code == 200
        new_refresh = response.json()["data"]["refreshToken"]
        assert new_refresh != old_refresh

        authenticated_client.cookies.clear()
        response = authenticated_client.post("/api/v1/users/refresh-token", json={"refreshToken": old_refresh})
        assert response.status_code == 401

        response = authenticated_client.post("/api/v1/users/refresh-token", json={"refreshToken": new_refresh})
        assert response.status_code == 200

    def test_refresh_without_token_returns_401(self, client):
        response = client.post("/api/v1/users/refresh-token")
        assert response.status_code == 401

    def test_logout_revokes_refresh_token(self, authenticated_client, db_session, test_user):
        refresh = authenticated_client.cookies.get("refreshToken")
        response = authenticated_client.post("/api/v1/users/logout")
        assert response.status_code == 200

        db_session.refresh(test_user)
        assert test_user.refresh_token_hash is None

        authenticated_client.cookies.clear()
        response = authenticated_client.post("/api/v1/users/refresh-token", json={"refreshToken": refresh})
        assert response.status_code == 401

    def test_change_password(self, client, test_user, auth_headers):
        headers = auth_headers(test_user)
        response = client.post(
            "/api/v1/users/change-password",
            json={"oldPassword": "wrong", "newPassword": "NewPass1!"},
            headers=headers,
        )
        assert response.status_code == 400

        response = client.post(
            "/api/v1/users/change-password",
            json={"oldPassword": "TestPassword123!", "newPassword": "NewPass1!"},
            headers=headers,
        )
        assert response.status_code == 200

        response = client.post("/api/v1/users/login", json={"userName": "alice", "password": "NewPass1!"})
        assert response.status_code == 200


@pytest.mark.high
class TestAccount:

    def test_update_account(self, client, test_user, auth_headers):
        response = client.patch(
            "/api/v1/users/update-account",
            json={"fullName": "Alice Cooper", "email": "cooper@example.com"},
            headers=auth_headers(test_user),
        )
        assert response.status_code == 200
        assert response.json()["data"]["fullName"] == "Alice Cooper"
        assert response.json()["data"]["email"] == "cooper@example.com"

    def test_update_account_email_taken(self, client, test_user, test_user_2, auth_headers):
        response = client.patch(
            "/api/v1/users/update-account",
            json={"fullName": "Alice", "email": test_user_2.email},
            headers=auth_headers(test_user),
        )
        assert response.status_code == 409

    def test_update_account_blank(self, client, test_user, auth_headers):
        response = client.patch(
            "/api/v1/users/update-account",
            json={"fullName": " ", "email": "a@b.com"},
            headers=auth_headers(test_user),
        )
        assert response.status_code == 400

    def test_replace_avatar_deletes_previous(self, client, test_user, auth_headers, media_host):
        old_avatar = test_user.avatar
        response = client.patch(
            "/api/v1/users/avatar",
            files={"avatar": ("new.png", b"new-avatar", "image/png")},
            headers=auth_headers(test_user),
        )
        assert response.status_code == 200
        assert response.json()["data"]["avatar"].startswith("https://media.test/avatars/")
        assert response.json()["data"]["avatar"] != old_avatar
        assert media_host.deleted == [old_avatar]

    def test_replace_cover_image_requires_file(self, client, test_user, auth_headers):
        response = client.patch("/api/v1/users/cover-image", headers=auth_headers(test_user))
        assert response.status_code == 400

    def test_channel_profile(self, client, test_user, test_user_2, auth_headers):
        response = client.post(f"/api/v1/subscriptions/c/{test_user.id}", headers=auth_headers(test_user_2))
        assert response.json()["data"] == {"isSubscribed": True}

        response = client.get("/api/v1/users/c/ALICE", headers=auth_headers(test_user_2))
        assert response.status_code == 200
        profile = response.json()["data"]
        assert profile["userName"] == "alice"
        assert profile["subscribersCount"] == 1
        assert profile["channelsSubscribedToCount"] == 0
        assert profile["isSubscribed"] is True

        response = client.get("/api/v1/users/c/alice", headers=auth_headers(test_user))
        assert response.json()["data"]["isSubscribed"] is False

    def test_channel_profile_unknown(self, client, test_user, auth_headers):
        response = client.get("/api/v1/users/c/nobody", headers=auth_headers(test_user))
        assert response.status_code == 404

    def test_watch_history_roundtrip(self, client, test_user, test_user_2, auth_headers, make_video):
        video = make_video(test_user_2, title="Watched")
        response = client.patch(f"/api/v1/users/watch/{video.id}", headers=auth_headers(test_user))
        assert response.status_code == 200

        response = client.get("/api/v1/users/history", headers=auth_headers(test_user))
        history = response.json()["data"]
        assert [v["id"] for v in history] == [video.id]
        assert history[0]["owner"]["userName"] == "bob"


@pytest.mark.critical
class TestIdValidation:
    """Malformed id -> 400, well-formed unknown id -> 404 on every resource kind"""

    @pytest.mark.parametrize("method,template", [
        ("get", "/api/v1/videos/{id}"),
        ("get", "/api/v1/comments/{id}"),
        ("patch", "/api/v1/comments/c/{id}"),
        ("delete", "/api/v1/tweets/{id}"),
        ("get", "/api/v1/playlists/{id}"),
        ("post", "/api/v1/likes/toggle/v/{id}"),
        ("post", "/api/v1/likes/toggle/c/{id}"),
        ("post", "/api/v1/likes/toggle/t/{id}"),
        ("post", "/api/v1/subscriptions/c/{id}"),
        ("get", "/api/v1/subscriptions/u/{id}"),
        ("get", "/api/v1/tweets/user/{id}"),
        ("patch", "/api/v1/users/watch/{id}"),
    ])
    def test_malformed_vs_missing(self, client, test_user, auth_headers, method, template):
        headers = auth_headers(test_user)
        kwargs = {"headers": headers}
        if method == "patch" and "comments" in template:
            kwargs["json"] = {"content": "x"}

        response = getattr(client, method)(template.format(id="not-an-id"), **kwargs)
        assert response.status_code == 400

        response = getattr(client, method)(template.format(id=str(uuid.uuid4())), **kwargs)
        assert response.status_code == 404


@pytest.mark.high
class TestVideos:

    def test_publish_requires_files(self, client, test_user, auth_headers):
        response = client.post(
            "/api/v1/videos",
            data={"title": "No file", "description": "x"},
            headers=auth_headers(test_user),
        )
        assert response.status_code == 400

    def test_publish_stores_duration(self, client, test_user, auth_headers):
        response = upload_video(client, auth_headers(test_user))
        assert response.status_code == 201
        assert response.json()["data"]["duration"] == 42.5
        assert response.json()["data"]["isPublished"] is True

    def test_get_increments_views(self, client, test_user, auth_headers, make_video):
        video = make_video(test_user)
        headers = auth_headers(test_user)
        client.get(f"/api/v1/videos/{video.id}", headers=headers)
        response = client.get(f"/api/v1/videos/{video.id}", headers=headers)
        assert response.json()["data"]["views"] == 2

    def test_list_filters_and_paginates(self, client, test_user, test_user_2, auth_headers, make_video):
        make_video(test_user, title="Cooking pasta", views=5)
        make_video(test_user, title="Cooking rice", views=50)
        make_video(test_user, title="Hidden cooking", is_published=False)
        make_video(test_user_2, title="Gardening")
        headers = auth_headers(test_user)

        response = client.get(
            "/api/v1/videos",
            params={"query": "cooking", "sortBy": "views", "sortType": "desc", "limit": 1},
            headers=headers,
        )
        assert response.status_code == 200
        page = response.json()["data"]
        assert page["totalDocs"] == 2
        assert page["totalPages"] == 2
        assert page["docs"][0]["title"] == "Cooking rice"

        response = client.get("/api/v1/videos", params={"userId": test_user_2.id}, headers=headers)
        assert [v["title"] for v in response.json()["data"]["docs"]] == ["Gardening"]

    def test_list_rejects_bad_pagination_and_sort(self, client, test_user, auth_headers):
        headers = auth_headers(test_user)
        assert client.get("/api/v1/videos", params={"page": 0}, headers=headers).status_code == 400
        assert client.get("/api/v1/videos", params={"limit": 101}, headers=headers).status_code == 400
        assert client.get("/api/v1/videos", params={"sortBy": "owner"}, headers=headers).status_code == 400
        assert client.get("/api/v1/videos", params={"page": "abc"}, headers=headers).status_code == 400

    def test_toggle_publish(self, client, test_user, auth_headers, make_video):
        video = make_video(test_user)
        response = client.patch(f"/api/v1/videos/toggle/publish/{video.id}", headers=auth_headers(test_user))
        assert response.status_code == 200
        assert response.json()["data"]["isPublished"] is False

    def test_delete_cascades(self, client, db_session, test_user, test_user_2, auth_headers, make_video, media_host):
        video = make_video(test_user)
        b_headers = auth_headers(test_user_2)
        client.post(f"/api/v1/likes/toggle/v/{video.id}", headers=b_headers)
        client.post(f"/api/v1/comments/{video.id}", json={"content": "Nice"}, headers=b_headers)
        media_urls = [video.video_file, video.thumbnail]

        response = client.delete(f"/api/v1/videos/{video.id}", headers=auth_headers(test_user))
        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.query(Video).count() == 0
        assert db_session.query(Like).count() == 0
        assert sorted(media_host.deleted) == sorted(media_urls)


@pytest.mark.high
class TestComments:

    def test_comment_lifecycle(self, client, test_user, test_user_2, auth_headers, make_video):
        video = make_video(test_user)
        headers = auth_headers(test_user_2)

        response = client.post(f"/api/v1/comments/{video.id}", json={"content": "  First!  "}, headers=headers)
        assert response.status_code == 201
        comment_id = response.json()["data"]["id"]
        assert response.json()["data"]["content"] == "First!"

        response = client.get(f"/api/v1/comments/{video.id}", headers=headers)
        assert response.json()["data"]["totalDocs"] == 1

        response = client.patch(f"/api/v1/comments/c/{comment_id}", json={"content": "Edited"}, headers=headers)
        assert response.json()["data"]["content"] == "Edited"

        response = client.delete(f"/api/v1/comments/c/{comment_id}", headers=auth_headers(test_user))
        assert response.status_code == 403

        response = client.delete(f"/api/v1/comments/c/{comment_id}", headers=headers)
        assert response.status_code == 200

    def test_blank_comment_rejected(self, client, test_user, auth_headers, make_video):
        video = make_video(test_user)
        response = client.post(f"/api/v1/comments/{video.id}", json={"content": "   "}, headers=auth_headers(test_user))
        assert response.status_code == 400


@pytest.mark.high
class TestSocial:

    def test_self_subscription_rejected(self, client, test_user, auth_headers):
        response = client.post(f"/api/v1/subscriptions/c/{test_user.id}", headers=auth_headers(test_user))
        assert response.status_code == 400

    def test_subscriber_lists(self, client, test_user, test_user_2, auth_headers):
        client.post(f"/api/v1/subscriptions/c/{test_user.id}", headers=auth_headers(test_user_2))

        response = client.get(f"/api/v1/subscriptions/c/{test_user.id}", headers=auth_headers(test_user))
        assert [s["subscriber"]["userName"] for s in response.json()["data"]] == ["bob"]

        response = client.get(f"/api/v1/subscriptions/u/{test_user_2.id}", headers=auth_headers(test_user))
        assert [s["channel"]["userName"] for s in response.json()["data"]] == ["alice"]

    def test_liked_videos(self, client, test_user, test_user_2, auth_headers, make_video):
        video = make_video(test_user, title="Likeable")
        client.post(f"/api/v1/likes/toggle/v/{video.id}", headers=auth_headers(test_user_2))

        response = client.get("/api/v1/likes/videos", headers=auth_headers(test_user_2))
        assert [item["video"]["title"] for item in response.json()["data"]] == ["Likeable"]

    def test_tweet_lifecycle_and_like(self, client, test_user, test_user_2, auth_headers):
        headers = auth_headers(test_user)
        response = client.post("/api/v1/tweets", json={"content": "Hello world"}, headers=headers)
        assert response.status_code == 201
        tweet_id = response.json()["data"]["id"]

        response = client.post(f"/api/v1/likes/toggle/t/{tweet_id}", headers=auth_headers(test_user_2))
        assert response.json()["data"]["isLiked"] is True

        response = client.get(f"/api/v1/tweets/user/{test_user.id}", headers=headers)
        assert [t["content"] for t in response.json()["data"]] == ["Hello world"]

        response = client.patch(f"/api/v1/tweets/{tweet_id}", json={"content": "x"}, headers=auth_headers(test_user_2))
        assert response.status_code == 403

        response = client.delete(f"/api/v1/tweets/{tweet_id}", headers=headers)
        assert response.status_code == 200


@pytest.mark.high
class TestPlaylists:

    def test_playlist_membership(self, client, test_user, auth_headers, make_video):
        headers = auth_headers(test_user)
        first = make_video(test_user, title="One")
        second = make_video(test_user, title="Two")

        response = client.post("/api/v1/playlists", json={"name": "Mix", "description": "Stuff"}, headers=headers)
        assert response.status_code == 201
        playlist_id = response.json()["data"]["id"]

        client.patch(f"/api/v1/playlists/add/{second.id}/{playlist_id}", headers=headers)
        response = client.patch(f"/api/v1/playlists/add/{first.id}/{playlist_id}", headers=headers)
        assert [v["title"] for v in response.json()["data"]["videos"]] == ["Two", "One"]

        response = client.patch(f"/api/v1/playlists/add/{first.id}/{playlist_id}", headers=headers)
        assert response.status_code == 400

        response = client.patch(f"/api/v1/playlists/remove/{second.id}/{playlist_id}", headers=headers)
        assert [v["title"] for v in response.json()["data"]["videos"]] == ["One"]

        response = client.patch(f"/api/v1/playlists/remove/{second.id}/{playlist_id}", headers=headers)
        assert response.status_code == 400

        response = client.get(f"/api/v1/playlists/user/{test_user.id}", headers=headers)
        assert [p["name"] for p in response.json()["data"]] == ["Mix"]

    def test_playlist_owner_only(self, client, test_user, test_user_2, auth_headers):
        response = client.post(
            "/api/v1/playlists", json={"name": "Mine", "description": "x"}, headers=auth_headers(test_user)
        )
        playlist_id = response.json()["data"]["id"]

        response = client.patch(
            f"/api/v1/playlists/{playlist_id}",
            json={"name": "Theirs", "description": "y"},
            headers=auth_headers(test_user_2),
        )
        assert response.status_code == 403

        response = client.delete(f"/api/v1/playlists/{playlist_id}", headers=auth_headers(test_user_2))
        assert response.status_code == 403


@pytest.mark.medium
class TestDashboardAndMonitoring:

    def test_dashboard_stats(self, client, test_user, test_user_2, auth_headers, make_video):
        video = make_video(test_user, views=7)
        make_video(test_user, views=3, is_published=False)
        client.post(f"/api/v1/likes/toggle/v/{video.id}", headers=auth_headers(test_user_2))
        client.post(f"/api/v1/subscriptions/c/{test_user.id}", headers=auth_headers(test_user_2))

        response = client.get("/api/v1/dashboard/stats", headers=auth_headers(test_user))
        assert response.json()["data"] == {
            "totalVideos": 2,
            "totalSubscribers": 1,
            "totalViews": 10,
            "totalLikes": 1,
        }

    def test_dashboard_videos_include_unpublished(self, client, test_user, auth_headers, make_video):
        make_video(test_user, is_published=False)
        response = client.get("/api/v1/dashboard/videos", headers=auth_headers(test_user))
        assert response.json()["data"]["totalDocs"] == 1

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["data"] == {"status": "healthy"}

    def test_metrics(self, client):
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "vidtube_toggles_total" in response.text

    def test_rate_limit(self, client, test_user, auth_headers):
        from vidtube.core.config import settings
        from unittest.mock import patch

        with patch.object(settings, 'RATE_LIMIT_REQUESTS', 2):
            headers = auth_headers(test_user)
            assert client.get("/api/v1/users/current-user", headers=headers).status_code == 200
            assert client.get("/api/v1/users/current-user", headers=headers).status_code == 200
            response = client.get("/api/v1/users/current-user", headers=headers)
            assert response.status_code == 429
            assert response.json()["success"] is False
