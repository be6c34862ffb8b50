from app.api.errors import ERROR_STATUS
from app.api.router import DEFAULT_ERROR_RESPONSES, create_router, error_responses


def test_every_mapped_status_is_documented():
    assert set(DEFAULT_ERROR_RESPONSES) == set(ERROR_STATUS.values()) | {500}
    assert {409, 410, 503} <= set(DEFAULT_ERROR_RESPONSES)


def test_description_lists_error_codes():
    responses = error_responses({"SHARE_EXPIRED": 410, "SHARE_REVOKED": 410})
    assert responses[410]["description"] == "Gone: SHARE_EXPIRED, SHARE_REVOKED"
    assert responses[500]["description"] == "Internal Server Error"


def test_extra_responses_override_defaults():
    router = create_router(name="demo", extra_responses={404: {"description": "Missing"}})
    assert router.name == "demo"
    assert router.responses[404] == {"description": "Missing"}
    assert router.responses[409] == DEFAULT_ERROR_RESPONSES[409]


def test_openapi_documents_conflict_and_gone(client):
    paths = client.get("/openapi.json").json()["paths"]
    responses = paths["/pinory/share/{share_slug}"]["get"]["responses"]
    assert {"409", "410", "503"} <= set(responses)
