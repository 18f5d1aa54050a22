from conftest import login
from tracker import create_app
from tracker.models import User

ACME = {"companyName": "Acme", "websiteUrl": "https://acme.test", "appliedAt": "2024-01-01"}


class TestAdminGuard:
    def test_regular_user_gets_403(self, client, make_user):
        _, headers = make_user()
        res = client.get("/admin/users", headers=headers)
        assert res.status_code == 403
        assert res.get_json() == {"error": "Forbidden"}

        assert client.get("/admin/applications", headers=headers).status_code == 403

    def test_anonymous_gets_401(self, client):
        assert client.get("/admin/users").status_code == 401


class TestAdminListing:
    def test_list_users(self, client, make_user, make_admin):
        make_user()
        _, admin = make_admin()

        res = client.get("/admin/users", headers=admin)
        assert res.status_code == 200
        users = res.get_json()
        assert [u["username"] for u in users] == ["root", "ada"]
        assert users[1] == {
            "id": users[1]["id"],
            "email": "ada@example.com",
            "username": "ada",
            "role": "regular",
            "phoneE164": "+15550001111",
            "createdAt": users[1]["createdAt"],
        }
        assert all("password_hash" not in u and "passwordHash" not in u for u in users)

    def test_list_all_applications_with_filters(self, client, make_user, make_admin):
        ada_id, ada = make_user()
        bob_id, bob = make_user(email="bob@example.com", username="bob")
        _, admin = make_admin()

        client.post("/applications", json={**ACME, "companyName": "A1"}, headers=ada)
        client.post("/applications", json={**ACME, "companyName": "B1", "status": "applied"}, headers=bob)
        client.post("/applications", json={**ACME, "companyName": "B2"}, headers=bob)

        res = client.get("/admin/applications", headers=admin)
        assert [a["companyName"] for a in res.get_json()] == ["B2", "B1", "A1"]

        res = client.get(f"/admin/applications?userId={bob_id}", headers=admin)
        assert [a["companyName"] for a in res.get_json()] == ["B2", "B1"]

        res = client.get(f"/admin/applications?userId={bob_id}&status=applied", headers=admin)
        assert [a["companyName"] for a in res.get_json()] == ["B1"]

        res = client.get(f"/admin/applications?userId={ada_id}&status=applied", headers=admin)
        assert res.get_json() == []

    def test_blank_filters_mean_no_filter(self, client, make_user, make_admin):
        _, ada = make_user()
        _, admin = make_admin()
        client.post("/applications", json=ACME, headers=ada)

        res = client.get("/admin/applications?userId=&status=", headers=admin)
        assert res.status_code == 200
        assert [a["companyName"] for a in res.get_json()] == ["Acme"]

    def test_bad_user_id_filter(self, client, make_admin):
        _, admin = make_admin()
        res = client.get("/admin/applications?userId=abc", headers=admin)
        assert res.status_code == 400
        assert res.get_json() == {"error": "Invalid userId"}


class TestAdminLogin:
    def test_wrong_password(self, client, make_admin):
        make_admin()
        res = login(client, email="root@example.com", password="wrong", admin=True)
        assert res.status_code == 401

    def test_admin_can_use_regular_login_too(self, client, make_admin):
        make_admin()
        res = login(client, email="root@example.com", password="admin-pass")
        assert res.status_code == 200


class TestAdminSeed:
    def seeded_app(self, tmp_path, **extra):
        config = {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'seed.db'}",
            "BCRYPT_ROUNDS": 4,
            "UPLOAD_DIR": str(tmp_path / "uploads"),
            "ADMIN_EMAIL": "Seed@Example.com",
            "ADMIN_USERNAME": "seed",
            "ADMIN_PASSWORD": "seed-pass",
            "ADMIN_PHONE": "+15550003333",
        }
        config.update(extra)
        return create_app(config)

    def test_seed_creates_admin(self, tmp_path):
        app = self.seeded_app(tmp_path)
        res = login(app.test_client(), email="seed@example.com", password="seed-pass", admin=True)
        assert res.status_code == 200

    def test_seed_is_idempotent(self, tmp_path):
        self.seeded_app(tmp_path)
        app = self.seeded_app(tmp_path)
        with app.app_context():
            assert User.query.filter_by(email="seed@example.com").count() == 1

    def test_seed_promotes_existing_user(self, tmp_path):
        app = self.seeded_app(tmp_path, ADMIN_EMAIL="")
        client = app.test_client()
        client.post(
            "/auth/signup",
            json={"email": "seed@example.com", "username": "early", "password": "pw", "phoneE164": "+1"},
        )

        app = self.seeded_app(tmp_path)
        with app.app_context():
            assert User.query.filter_by(email="seed@example.com").one().role == "admin"

    def test_seed_cli_command(self, tmp_path):
        app = self.seeded_app(tmp_path)
        result = app.test_cli_runner().invoke(args=["seed-admin"])
        assert "Admin ready: seed@example.com" in result.output
