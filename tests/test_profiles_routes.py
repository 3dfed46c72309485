from __future__ import annotations


def role_of(supabase, user_id: str):
    return next(p["role"] for p in supabase.rows("profiles") if p["id"] == user_id)


def test_super_user_promotes_a_developer(client, supabase, bearer) -> None:
    response = client.post("/api/admin/make-expert", headers=bearer("admin-token"), json={"user_id": "dev-2"})

    assert response.status_code == 200
    assert response.json()["data"] == {"message": "User dev-2 set to expert", "user_id": "dev-2", "role": "expert"}
    assert role_of(supabase, "dev-2") == "expert"


def test_super_user_can_demote(client, supabase, bearer) -> None:
    response = client.post("/api/admin/make-expert", headers=bearer("admin-token"),
                           json={"user_id": "expert-1", "role": "developer"})

    assert response.status_code == 200
    assert role_of(supabase, "expert-1") == "developer"


def test_only_super_users_change_roles(client, supabase, bearer) -> None:
    for token in ("dev-token", "expert-token"):
        response = client.post("/api/admin/make-expert", headers=bearer(token), json={"user_id": "dev-2"})
        assert response.status_code == 403
    assert role_of(supabase, "dev-2") == "developer"


def test_promoting_unknown_user_is_404(client, bearer) -> None:
    response = client.post("/api/admin/make-expert", headers=bearer("admin-token"), json={"user_id": "ghost"})

    assert response.status_code == 404


def test_invalid_role_is_400(client, bearer) -> None:
    response = client.post("/api/admin/make-expert", headers=bearer("admin-token"),
                           json={"user_id": "dev-2", "role": "admin"})

    assert response.status_code == 400


def test_self_promotion_disabled_by_default(client, supabase, bearer) -> None:
    response = client.post("/api/admin/make-me-expert", headers=bearer("dev-token"))

    assert response.status_code == 403
    assert role_of(supabase, "dev-1") == "developer"


def test_self_promotion_when_enabled(client, app, supabase, bearer) -> None:
    app.state.settings.allow_self_promotion = True

    response = client.post("/api/admin/make-me-expert", headers=bearer("dev-token"))

    assert response.status_code == 200
    assert role_of(supabase, "dev-1") == "expert"
    assert client.get("/api/auth/me", headers=bearer("dev-token")).json()["data"]["profile"]["role"] == "expert"


def test_self_promotion_creates_missing_profile(client, app, supabase, bearer) -> None:
    app.state.settings.allow_self_promotion = True

    response = client.post("/api/admin/make-me-expert", headers=bearer("admin-token"))

    assert response.status_code == 200
    assert role_of(supabase, "admin-1") == "expert"
