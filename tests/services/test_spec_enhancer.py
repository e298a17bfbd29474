# tests/services/test_spec_enhancer.py

"""
Tests for the spec enhancer.

These tests ensure:
1. Overlay fields always win over the remote document
2. Unrelated info fields survive
3. servers is always exactly our backend
4. The input is never mutated and output is deterministic
"""
import copy

from picaloco_docs.services.spec_enhancer import (
    API_CONTACT,
    API_DESCRIPTION,
    API_TITLE,
    API_VERSION,
    enhance_spec,
)


def _raw_spec():
    return {
        "swagger": "2.0",
        "info": {
            "title": "standard public schema",
            "description": "PostgREST generated",
            "version": "12.0.2",
            "contact": {"name": "someone else"},
            "x-logo": {"url": "https://example.com/logo.png"},
        },
        "servers": [{"url": "https://elsewhere.example.com"}, {"url": "http://localhost"}],
        "paths": {"/": {"get": {"summary": "OpenAPI description"}}},
    }


def test_overlay_wins_over_remote_info(config):
    enhanced = enhance_spec(_raw_spec(), config)

    assert enhanced["info"]["title"] == API_TITLE == "Pica Loco API"
    assert enhanced["info"]["description"] == API_DESCRIPTION
    assert enhanced["info"]["version"] == API_VERSION
    assert enhanced["info"]["contact"] == API_CONTACT


def test_other_info_fields_preserved(config):
    enhanced = enhance_spec(_raw_spec(), config)

    assert enhanced["info"]["x-logo"] == {"url": "https://example.com/logo.png"}
    assert enhanced["paths"] == _raw_spec()["paths"]
    assert enhanced["swagger"] == "2.0"


def test_servers_replaced_with_single_backend_entry(config):
    enhanced = enhance_spec(_raw_spec(), config)

    assert len(enhanced["servers"]) == 1
    assert enhanced["servers"][0]["url"] == "https://demo-project.supabase.co/rest/v1"


def test_minimal_document_gets_info_and_servers(config):
    enhanced = enhance_spec({"paths": {}}, config)

    assert enhanced["info"]["title"] == API_TITLE
    assert enhanced["servers"] == [
        {"url": config.server_url, "description": "Pica Loco API Server"}
    ]


def test_non_mapping_info_is_replaced(config):
    enhanced = enhance_spec({"info": "garbage"}, config)

    assert enhanced["info"]["title"] == API_TITLE


def test_input_not_mutated(config):
    raw = _raw_spec()
    before = copy.deepcopy(raw)

    enhanced = enhance_spec(raw, config)
    enhanced["paths"]["/"]["get"]["summary"] = "changed"
    enhanced["info"]["contact"]["name"] = "changed"

    assert raw == before


def test_enhance_is_idempotent(config):
    raw = _raw_spec()

    once = enhance_spec(raw, config)
    twice = enhance_spec(raw, config)

    assert once == twice
    assert enhance_spec(once, config) == once
