from picaloco_docs.services.fallback_spec import build_placeholder_spec


def test_placeholder_with_config(config):
    spec = build_placeholder_spec(config)

    assert spec["openapi"] == "3.0.0"
    assert spec["info"]["title"] == "Pica Loco API - Loading"
    assert spec["servers"] == [
        {"url": "https://demo-project.supabase.co/rest/v1", "description": "Pica Loco API Server"}
    ]
    assert "/health" in spec["paths"]


def test_placeholder_without_config():
    spec = build_placeholder_spec(None)

    assert spec["servers"] == []
    assert spec["info"]["version"] == "1.0.0"
    assert set(spec["paths"]) == {"/health", "/debug"}


def test_placeholder_reports_error(config):
    spec = build_placeholder_spec(config, error="remote_rejected: HTTP 500")

    assert spec["info"]["title"] == "Pica Loco API - Initialization Error"
    assert "remote_rejected: HTTP 500" in spec["info"]["description"]


def test_placeholder_paths_are_well_formed():
    spec = build_placeholder_spec()

    for path_item in spec["paths"].values():
        assert "200" in path_item["get"]["responses"]
