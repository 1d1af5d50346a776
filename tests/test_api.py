def test_health_check(test_client):
    """Test health check endpoint"""
    response = test_client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_readiness_check(test_client):
    """Test readiness check endpoint"""
    response = test_client.get("/api/health/readiness")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["generation_provider"] == "ok"
    assert "timestamp" in data


def test_ui_shell_is_served(test_client):
    response = test_client.get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert 'id="mockarooApiKey"' in response.text
    assert 'id="generateForm"' in response.text


def test_ui_script_validates_mockaroo_key_before_fetching(test_client):
    """Static check of the served script only.

    The JavaScript is not executed here; this asserts that the empty-key
    message precedes the Mockaroo fetch in the source, nothing more.
    """
    script = test_client.get("/app.js").text
    check = script.index("Please enter your Mockaroo API key.")
    # the empty-key branch returns before the network call is issued
    assert check < script.index("fetch(MOCKAROO_URL")


def test_cors_allows_dev_frontend_with_credentials(test_client):
    response = test_client.options(
        "/api/jira/status",
        headers={"Origin": "http://localhost:5174", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5174"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_unknown_origin(test_client):
    response = test_client.options(
        "/api/jira/status",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "GET"},
    )
    assert "access-control-allow-origin" not in response.headers
