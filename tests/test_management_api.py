"""
Project management endpoints (admin token + X-Tenant-ID)
"""

import pytest

ADMIN_TOKEN = "test-admin-key"


def _base(ws):
    return f"/api/projects/{ws.project_id}"


class TestAccess:

    def test_admin_token_required(self, client, workspace):
        response = client.get(f"{_base(workspace)}/config", headers={"X-Tenant-ID": str(workspace.tenant_id)})
        assert response.status_code == 401
        assert response.json() == {"error": "Missing Authorization header"}

    def test_wrong_admin_token(self, client, workspace):
        headers = {"Authorization": "Bearer nope", "X-Tenant-ID": str(workspace.tenant_id)}
        response = client.get(f"{_base(workspace)}/config", headers=headers)
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid API key"}

    def test_api_key_is_not_an_admin_token(self, client, workspace):
        headers = {"Authorization": workspace.secret_key, "X-Tenant-ID": str(workspace.tenant_id)}
        assert client.get(f"{_base(workspace)}/config", headers=headers).status_code == 401

    def test_tenant_header_required(self, client, workspace):
        response = client.get(f"{_base(workspace)}/config", headers={"Authorization": f"Bearer {ADMIN_TOKEN}"})
        assert response.status_code == 400

    def test_unknown_tenant(self, client, workspace):
        headers = {"Authorization": f"Bearer {ADMIN_TOKEN}", "X-Tenant-ID": "99999999"}
        response = client.get(f"{_base(workspace)}/config", headers=headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Tenant not found"}

    def test_non_ascii_admin_token(self, client, workspace):
        headers = {"Authorization": "Bearer café".encode("utf-8"), "X-Tenant-ID": str(workspace.tenant_id)}
        response = client.get(f"{_base(workspace)}/config", headers=headers)
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid API key"}

    def test_project_of_other_tenant(self, client, workspace, other_workspace):
        headers = {"Authorization": f"Bearer {ADMIN_TOKEN}", "X-Tenant-ID": str(other_workspace.tenant_id)}
        response = client.get(f"{_base(workspace)}/config", headers=headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Project not found"}


class TestApiKeys:

    def test_create_list_delete(self, client, workspace, admin_headers):
        created = client.post(f"{_base(workspace)}/api-keys", json={"type": "public"}, headers=admin_headers)
        assert created.status_code == 201
        data = created.json()
        assert data["message"] == "API key created"
        assert data["api_key"]["key_class"] == "public"
        assert "private_hash" not in data["api_key"]
        assert data["full_key"].startswith(f"sk_{data['api_key']['public_part']}_")
        assert data["public_key"] == f"pk_{data['api_key']['public_part']}"

        # The new key works right away
        ok = client.get("/api/v1/public/config", headers={"Authorization": data["full_key"]})
        assert ok.status_code == 200
        embedded = client.get("/api/v1/public/config", headers={"Authorization": data["public_key"]})
        assert embedded.status_code == 200

        listed = client.get(f"{_base(workspace)}/api-keys", headers=admin_headers).json()["api_keys"]
        assert listed[0]["id"] == data["api_key"]["id"]
        assert all("private_hash" not in k for k in listed)

        deleted = client.delete(f"{_base(workspace)}/api-keys/{data['api_key']['id']}", headers=admin_headers)
        assert deleted.status_code == 200
        gone = client.get("/api/v1/public/config", headers={"Authorization": data["full_key"]})
        assert gone.status_code == 401

    def test_default_type_is_secret(self, client, workspace, admin_headers):
        created = client.post(f"{_base(workspace)}/api-keys", json={}, headers=admin_headers)
        assert created.json()["api_key"]["key_class"] == "secret"
        assert created.json()["public_key"] is None

    def test_invalid_type(self, client, workspace, admin_headers):
        response = client.post(f"{_base(workspace)}/api-keys", json={"type": "root"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request data"

    def test_delete_missing_key(self, client, workspace, admin_headers):
        response = client.delete(f"{_base(workspace)}/api-keys/99999999", headers=admin_headers)
        assert response.status_code == 404


class TestConfigs:

    def test_crud(self, client, workspace, admin_headers, secret_headers):
        created = client.post(f"{_base(workspace)}/config", headers=admin_headers,
                              json={"name": "limit", "value": "10", "value_type": "number"})
        assert created.status_code == 201
        config = created.json()["config"]
        assert config["is_public"] is False
        assert config["description"] == ""

        url = f"{_base(workspace)}/config/{config['id']}"
        assert client.get(url, headers=admin_headers).json()["config"]["name"] == "limit"

        patched = client.patch(url, headers=admin_headers, json={"value": "20"})
        assert patched.status_code == 200
        assert patched.json()["config"]["value"] == "20"
        assert patched.json()["config"]["value_type"] == "number"

        assert client.get("/api/v1/config", headers=secret_headers).json() == {"limit": 20}

        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.get(url, headers=admin_headers).status_code == 404

    def test_duplicate_name(self, client, workspace, admin_headers):
        body = {"name": "dup", "value": "x"}
        assert client.post(f"{_base(workspace)}/config", headers=admin_headers, json=body).status_code == 201
        response = client.post(f"{_base(workspace)}/config", headers=admin_headers, json=body)
        assert response.status_code == 409

    @pytest.mark.parametrize("body", [{"name": ""}, {"value": "x"}, {"name": "a", "value_type": "json"}])
    def test_validation(self, client, workspace, admin_headers, body):
        response = client.post(f"{_base(workspace)}/config", headers=admin_headers, json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request data"
        assert response.json()["details"]


class TestFeatureFlags:

    def test_crud(self, client, workspace, admin_headers):
        created = client.post(f"{_base(workspace)}/feature-flags", headers=admin_headers,
                              json={"name": "beta", "value": "true", "value_type": "boolean",
                                    "user_account_id": "acc1"})
        assert created.status_code == 201
        flag = created.json()["feature_flag"]
        assert (flag["user_id"], flag["user_role"], flag["user_account_id"]) == ("", "", "acc1")

        url = f"{_base(workspace)}/feature-flags/{flag['id']}"
        patched = client.patch(url, headers=admin_headers, json={"is_public": True})
        assert patched.json()["feature_flag"]["is_public"] is True

        listed = client.get(f"{_base(workspace)}/feature-flags", headers=admin_headers).json()
        assert [f["id"] for f in listed["feature_flags"]] == [flag["id"]]

        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.delete(url, headers=admin_headers).status_code == 404

    def test_duplicate_targeting_tuple(self, client, workspace, admin_headers):
        body = {"name": "beta", "value": "a", "user_role": "admin", "user_account_id": "acc1"}
        assert client.post(f"{_base(workspace)}/feature-flags", headers=admin_headers, json=body).status_code == 201
        again = client.post(f"{_base(workspace)}/feature-flags", headers=admin_headers, json={**body, "value": "b"})
        assert again.status_code == 409

        # Same name with a different tuple is a separate variant
        other = client.post(f"{_base(workspace)}/feature-flags", headers=admin_headers,
                            json={"name": "beta", "value": "c"})
        assert other.status_code == 201

    def test_patch_into_existing_tuple(self, client, workspace, admin_headers):
        base = f"{_base(workspace)}/feature-flags"
        client.post(base, headers=admin_headers, json={"name": "x", "value": "default"})
        targeted = client.post(base, headers=admin_headers,
                               json={"name": "x", "value": "acc", "user_account_id": "a1"}).json()["feature_flag"]
        response = client.patch(f"{base}/{targeted['id']}", headers=admin_headers, json={"user_account_id": ""})
        assert response.status_code == 409

        unchanged = client.get(f"{base}/{targeted['id']}", headers=admin_headers).json()["feature_flag"]
        assert unchanged["user_account_id"] == "a1"


class TestConcurrentWrites:

    def test_config_rename_hitting_constraint(self, client, workspace, admin_headers, monkeypatch):
        base = f"{_base(workspace)}/config"
        client.post(base, headers=admin_headers, json={"name": "a", "value": "1"})
        second = client.post(base, headers=admin_headers, json={"name": "b", "value": "2"}).json()["config"]

        # Another writer claimed the name after the pre-check
        monkeypatch.setattr("flagdeck.services.configs.ConfigService._name_taken", lambda *args, **kwargs: False)
        response = client.patch(f"{base}/{second['id']}", headers=admin_headers, json={"name": "a"})
        assert response.status_code == 409
        assert client.get(f"{base}/{second['id']}", headers=admin_headers).json()["config"]["name"] == "b"

    def test_flag_patch_hitting_constraint(self, client, workspace, admin_headers, monkeypatch):
        base = f"{_base(workspace)}/feature-flags"
        client.post(base, headers=admin_headers, json={"name": "x", "value": "default"})
        targeted = client.post(base, headers=admin_headers,
                               json={"name": "x", "value": "acc", "user_account_id": "a1"}).json()["feature_flag"]

        monkeypatch.setattr("flagdeck.services.feature_flags.FeatureFlagService._find_variant",
                            lambda *args, **kwargs: None)
        response = client.patch(f"{base}/{targeted['id']}", headers=admin_headers, json={"user_account_id": ""})
        assert response.status_code == 409
