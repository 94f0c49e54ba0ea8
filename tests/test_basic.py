def test_app_importable():
    """Import the FastAPI app module to ensure it can be imported without errors."""
    import importlib

    mod = importlib.import_module("snapquiz.main")
    assert hasattr(mod, "app")


def test_root_returns_welcome(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "SnapQuiz" in r.json()["message"]


def test_api_routes_are_mounted(client):
    """Protected routes answer 401 (not 404) when nobody is logged in."""
    assert client.post("/api/attempts", json={"testId": 1, "answers": {"1": [1]}}).status_code == 401
    assert client.get("/api/attempts/1").status_code == 401
    assert client.get("/api/attempts/all-test-attempts/1").status_code == 401
    assert client.get("/api/tests").status_code == 401
    assert client.get("/api/users/1").status_code == 401
