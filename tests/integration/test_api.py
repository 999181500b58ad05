from __future__ import annotations

import httpx
import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from daxtraparser.api import create_app
from daxtraparser.container import create_container
from daxtraparser.core.client import (
    CONVERT_HTML_HQ_PATH,
    CONVERT_HTML_PATH,
    DATA_PATH,
    FULL_PROFILE_PATH,
    JOB_ORDER_PATH,
    PERSONAL_PROFILE_PATH,
)
from daxtraparser.schemas import ServiceSettings

SETTINGS = {
    "daxtra": {
        "base_url": "https://cvx.example.com",
        "account": "acme",
        "jwt_secret": "secret",
    }
}

PROFILE = {
    "StructuredResume": {
        "Competency": [
            {"skillName": "Python", "skillLevel": 9, "skillProficiency": "EXCELLENT"},
            {"skillName": "COBOL", "skillLevel": 2},
        ]
    }
}

UPLOAD = {"file": ("cv.pdf", b"%PDF-1.4 resume", "application/pdf")}


def remote(routes: dict[str, httpx.Response | Exception]):
    def handler(request: httpx.Request) -> httpx.Response:
        outcome = routes[request.url.path]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return handler


@pytest.fixture
def build_app(make_client):
    def factory(routes: dict[str, httpx.Response | Exception], **service_settings) -> TestClient:
        container = create_container(settings=SETTINGS)
        container.client.override(providers.Object(make_client(remote(routes))))
        app = create_app(container, ServiceSettings(**service_settings))
        return TestClient(app, raise_server_exceptions=False)

    return factory


def test_healthz_reports_remote_configuration(build_app):
    api = build_app({})

    response = api.get("/healthz")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "parser-microservice"
    assert body["daxtra"] == {
        "base_url": "https://cvx.example.com",
        "account": "acme-account",
        "turbo": False,
    }
    assert body["timestamp"]


def test_full_resume_returns_profile_competencies_and_summary(build_app):
    api = build_app({FULL_PROFILE_PATH: httpx.Response(200, json=PROFILE)})

    response = api.post("/resume/full", files=UPLOAD)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["parsing_method"] == "full"
    assert data["file_info"] == {"original_name": "cv.pdf", "size_kb": 0, "mime_type": "application/pdf"}
    assert data["profile"]["StructuredResume"]["Competency"][0]["skillName"] == "Python"
    assert [item["skillName"] for item in data["competencies"]] == ["Python", "COBOL"]
    assert data["summary"] == {
        "total_competencies": 2,
        "top_skills": [{"name": "Python", "level": 9, "proficiency": "EXCELLENT"}],
    }


def test_two_phase_resume(build_app):
    api = build_app(
        {
            PERSONAL_PROFILE_PATH: httpx.Response(200, json={"phase2_token": "t-1"}),
            DATA_PATH: httpx.Response(200, json=PROFILE),
        }
    )

    response = api.post("/resume/two-phase", files=UPLOAD)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["parsing_method"] == "two-phase"
    assert data["personal"]["phase2_token"] == "t-1"
    assert data["summary"]["total_competencies"] == 2


def test_vacancy(build_app):
    api = build_app({JOB_ORDER_PATH: httpx.Response(200, json={"StructuredResume": {"Title": "SRE"}})})

    response = api.post("/vacancy", files=UPLOAD)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["parsing_method"] == "vacancy"
    assert data["profile"] == {"StructuredResume": {"Title": "SRE"}}


@pytest.mark.parametrize(
    ("kwargs", "expected_quality"),
    [
        ({}, False),
        ({"data": {"high_quality": "true"}}, True),
        ({"params": {"high_quality": "true"}}, True),
        ({"data": {"high_quality": "1"}}, False),
    ],
)
def test_convert_html_quality_option(build_app, kwargs, expected_quality):
    api = build_app(
        {
            CONVERT_HTML_PATH: httpx.Response(200, text="<html>normal</html>"),
            CONVERT_HTML_HQ_PATH: httpx.Response(200, text="<html>hq</html>"),
        }
    )

    response = api.post("/convert/html", files=UPLOAD, **kwargs)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["conversion_options"] == {"high_quality": expected_quality}
    assert data["html"] == ("<html>hq</html>" if expected_quality else "<html>normal</html>")


@pytest.mark.parametrize("path", ["/resume/full", "/resume/two-phase", "/vacancy", "/convert/html"])
def test_missing_file_is_rejected(build_app, path):
    api = build_app({})

    response = api.post(path)

    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}


def test_oversized_file_is_rejected(build_app):
    api = build_app({}, max_upload_bytes=8)

    response = api.post("/resume/full", files=UPLOAD)

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "file_too_large"


def test_remote_error_status_is_propagated(build_app):
    body = {"CSERROR": {"code": "E401", "message": "Bad account"}}
    api = build_app({FULL_PROFILE_PATH: httpx.Response(401, json=body)})

    response = api.post("/resume/full", files=UPLOAD)

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": {"type": "daxtra_error", "code": "E401", "message": "Bad account", "status": 401},
    }


def test_domain_error_in_ok_response_is_400(build_app):
    body = dict(PROFILE, CSERROR={"code": 12, "message": "Corrupt file"})
    api = build_app({FULL_PROFILE_PATH: httpx.Response(200, json=body)})

    response = api.post("/resume/full", files=UPLOAD)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "12"


def test_unexpected_html_payload_is_500(build_app):
    api = build_app({CONVERT_HTML_PATH: httpx.Response(200, json={"not": "html"})})

    response = api.post("/convert/html", files=UPLOAD)

    assert response.status_code == 500
    assert response.json()["error"]["type"] == "daxtra_error"


def test_network_failure_maps_to_bad_gateway(build_app, sleeps):
    api = build_app({JOB_ORDER_PATH: httpx.ConnectError("refused")})

    response = api.post("/vacancy", files=UPLOAD)

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "network_error"
    assert len(sleeps) == 2


def test_unexpected_exception_is_internal_error(build_app):
    class Exploding:
        def parse_job_order(self, content, filename):
            raise RuntimeError("boom")

    api = build_app({})
    api.app.state.container.client.override(providers.Object(Exploding()))

    response = api.post("/vacancy", files=UPLOAD)

    assert response.status_code == 500
    assert response.json()["error"] == {
        "type": "internal_error",
        "message": "An unexpected error occurred",
    }


def test_correlation_id_is_echoed_or_generated(build_app):
    api = build_app({})

    echoed = api.get("/healthz", headers={"X-Correlation-ID": "trace-7"})
    generated = api.get("/healthz")

    assert echoed.headers["X-Correlation-ID"] == "trace-7"
    assert len(generated.headers["X-Correlation-ID"]) == 32
