"""
Runtime config endpoints
"""


def test_all_configs_typed(client, secret_headers, seed):
    seed.config("api_url", "https://example.com")
    seed.config("timeout", "30", value_type="number")
    seed.config("ratio", "0.25", value_type="number")
    seed.config("debug", "false", value_type="boolean")
    seed.config("bad_number", "thirty", value_type="number")

    response = client.get("/api/v1/config", headers=secret_headers)
    assert response.status_code == 200
    assert response.json() == {
        "api_url": "https://example.com",
        "timeout": 30,
        "ratio": 0.25,
        "debug": False,
        "bad_number": "thirty",
    }


def test_empty_project(client, secret_headers):
    response = client.get("/api/v1/config", headers=secret_headers)
    assert response.status_code == 200
    assert response.json() == {}


def test_public_config_only_public(client, public_headers, seed):
    seed.config("theme", "dark", is_public=True)
    seed.config("db_password", "hunter2")

    response = client.get("/api/v1/public/config", headers=public_headers)
    assert response.status_code == 200
    assert response.json() == {"theme": "dark"}


def test_configs_scoped_to_key_project(client, other_workspace, seed):
    seed.config("mine", "1")
    response = client.get("/api/v1/config", headers={"Authorization": other_workspace.secret_key})
    assert response.status_code == 200
    assert "mine" not in response.json()
