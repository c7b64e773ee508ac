"""HTTP-level tests: auth, the permission gate, multipart writes and listings."""

import json

from portal.models.news import News


def news_form(**overrides):
    data = {"title": "Clean-up Drive", "content": "Saturday at 7 AM.", "category": "Event", "status": "published"}
    data.update(overrides)
    return {"data": json.dumps(data)}


class TestAuth:

    def test_login_and_me(self, client, news_editor):
        response = client.post("/api/auth/login", json={"email": news_editor.email, "password": "password123"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        body = me.json()
        assert body["user"]["email"] == news_editor.email
        assert body["context"]["badge_counts"] == {"news": 0, "trash": 0}

    def test_bad_credentials(self, client, news_editor):
        response = client.post("/api/auth/login", json={"email": news_editor.email, "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_missing_token(self, client):
        assert client.get("/api/news/").status_code == 401

    def test_deactivated_user_token_rejected(self, client, make_user, auth_headers):
        user = make_user(permissions=["news"], is_active=False)
        assert client.get("/api/news/", headers=auth_headers(user)).status_code == 401


class TestGate:

    def test_forbidden_json(self, client, outsider, auth_headers):
        response = client.get("/api/news/", headers=auth_headers(outsider))
        assert response.status_code == 403
        assert "News Management" in response.json()["detail"]

    def test_denied_before_body_validation(self, client, outsider, auth_headers):
        """An invalid body from an unauthorized user still yields 403."""
        response = client.post("/api/news/", data={"data": "not json"}, headers=auth_headers(outsider))
        assert response.status_code == 403

    def test_interactive_request_redirected_with_flash(self, client, outsider, auth_headers):
        headers = {
            **auth_headers(outsider),
            "Accept": "text/html,application/xhtml+xml",
            "Referer": "/dashboard",
        }
        response = client.get("/api/news/", headers=headers, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"
        assert "News Management" in response.cookies.get("flash_error", "")

    def test_xhr_gets_json(self, client, outsider, auth_headers):
        headers = {**auth_headers(outsider), "Accept": "text/html", "X-Requested-With": "XMLHttpRequest"}
        response = client.get("/api/news/", headers=headers, follow_redirects=False)
        assert response.status_code == 403

    def test_admin_passes_with_corrupted_permissions(self, client, make_user, auth_headers):
        admin = make_user(role="admin", permissions="{{corrupted")
        assert client.get("/api/tourism/", headers=auth_headers(admin)).status_code == 200

    def test_users_endpoint_admin_only(self, client, news_editor, admin, auth_headers):
        assert client.get("/api/users/", headers=auth_headers(news_editor)).status_code == 403
        assert client.get("/api/users/", headers=auth_headers(admin)).status_code == 200
        assert client.get(f"/api/users/{news_editor.id}", headers=auth_headers(news_editor)).status_code == 200


class TestNewsEndpoints:

    def test_create_with_image(self, client, news_editor, auth_headers, storage):
        response = client.post(
            "/api/news/",
            data=news_form(),
            files={"image": ("cover.jpg", b"\xff\xd8\xff fake", "image/jpeg")},
            headers=auth_headers(news_editor),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Article created successfully."
        assert storage.exists(body["data"]["image_path"])
        assert body["context"]["badge_counts"]["news"] == 1
        assert {"value": "Event", "label": "Event"} in body["options"]["category"]

    def test_validation_errors_echo_input(self, client, news_editor, auth_headers, db):
        response = client.post("/api/news/", data=news_form(title="", category="Gossip"), headers=auth_headers(news_editor))
        assert response.status_code == 422
        body = response.json()
        assert set(body["errors"]) == {"title", "category"}
        assert body["input"]["category"] == "Gossip"
        assert db.query(News).count() == 0

    def test_malformed_data_field(self, client, news_editor, auth_headers):
        response = client.post("/api/news/", data={"data": "[1, 2]"}, headers=auth_headers(news_editor))
        assert response.status_code == 422
        assert "data" in response.json()["errors"]

    def test_toggle_and_delete(self, client, news_editor, auth_headers):
        headers = auth_headers(news_editor)
        created = client.post("/api/news/", data=news_form(), headers=headers).json()["data"]

        toggled = client.patch(f"/api/news/{created['id']}/featured", headers=headers).json()
        assert toggled["value"] is True
        assert toggled["message"] == "Article featured successfully."

        deleted = client.delete(f"/api/news/{created['id']}", headers=headers)
        assert deleted.status_code == 200
        assert deleted.json()["context"]["badge_counts"]["trash"] == 1
        assert client.get(f"/api/news/{created['id']}", headers=headers).status_code == 404

    def test_list_links_carry_filters(self, client, news_editor, auth_headers):
        headers = auth_headers(news_editor)
        for title, category in (("A", "Event"), ("B", "Finance"), ("C", "Event")):
            client.post("/api/news/", data=news_form(title=title, category=category), headers=headers)

        body = client.get("/api/news/?category=Event&page_size=1", headers=headers).json()

        assert body["total"] == 2
        assert body["total_pages"] == 2
        assert body["items"][0]["category"] == "Event"
        assert body["links"]["next"] == "/api/news/?category=Event&page=2&page_size=1"

    def test_status_update(self, client, news_editor, auth_headers):
        headers = auth_headers(news_editor)
        created = client.post("/api/news/", data=news_form(status="draft"), headers=headers).json()["data"]
        response = client.patch(f"/api/news/{created['id']}/status", json={"status": "archived"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "archived"


class TestOtherEndpoints:

    def test_full_disclosure_download(self, client, admin, auth_headers):
        headers = auth_headers(admin)
        created = client.post(
            "/api/full-disclosure/",
            data={"data": json.dumps({"title": "Budget", "category": "approved_budget"})},
            files={"file": ("budget.pdf", b"%PDF-1.4 budget", "application/pdf")},
            headers=headers,
        )
        assert created.status_code == 201
        document_id = created.json()["data"]["id"]

        response = client.get(f"/api/full-disclosure/{document_id}/download", headers=headers)
        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 budget"
        assert "budget.pdf" in response.headers["content-disposition"]

    def test_sangguniang_bayan_order(self, client, admin, auth_headers):
        headers = auth_headers(admin)
        ids = [
            client.post(
                "/api/sangguniang-bayan/",
                data={"data": json.dumps({"name": name, "position": "SB Member"})},
                headers=headers,
            ).json()["data"]["id"]
            for name in ("A", "B")
        ]
        response = client.patch(f"/api/sangguniang-bayan/{ids[1]}/order", json={"order": 0}, headers=headers)
        assert response.status_code == 200
        names = [m["name"] for m in client.get("/api/sangguniang-bayan/", headers=headers).json()["items"]]
        assert names == ["B", "A"]

    def test_activity_logs_admin_only(self, client, admin, news_editor, auth_headers):
        client.post("/api/news/", data=news_form(), headers=auth_headers(news_editor))
        assert client.get("/api/activity-logs/", headers=auth_headers(news_editor)).status_code == 403
        body = client.get("/api/activity-logs/?type=news", headers=auth_headers(admin)).json()
        assert body["total"] == 1
        assert body["items"][0]["metadata"]["action"] == "created"

    def test_dashboard_and_context(self, client, news_editor, auth_headers):
        headers = auth_headers(news_editor)
        assert set(client.get("/api/dashboard", headers=headers).json()["stats"]) == {"news"}
        context = client.get("/api/context", headers=headers).json()
        assert context["permissions"]["can_manage_trash"] is True

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}


class TestRequestTracing:

    def test_request_id_echoed_and_recorded(self, client, admin, news_editor, auth_headers):
        """A caller-supplied request id comes back on the response and lands in the activity entry."""
        headers = {**auth_headers(news_editor), "X-Request-Id": "trace-42"}
        response = client.post("/api/news/", data=news_form(), headers=headers)
        assert response.status_code == 201
        assert response.headers["X-Request-Id"] == "trace-42"

        body = client.get("/api/activity-logs/?type=news", headers=auth_headers(admin)).json()
        assert body["items"][0]["metadata"]["request_id"] == "trace-42"

    def test_request_id_generated_when_missing(self, client):
        response = client.get("/api/health")
        assert len(response.headers["X-Request-Id"]) == 32

    def test_oversized_request_id_replaced(self, client):
        response = client.get("/api/health", headers={"X-Request-Id": "x" * 200})
        assert response.headers["X-Request-Id"] != "x" * 200
