"""
Tests for requirements intake — schema validation and Requirements value.
"""

from __future__ import annotations

from projectgen.core.requirements import PROJECT_TYPES, Requirements, validate_requirements


class TestValidateRequirements:
    def test_valid_payload(self, payload: dict):
        ok, errors = validate_requirements(payload)
        assert ok is True
        assert errors == []

    def test_optional_fields_may_be_omitted_or_null(self, payload: dict):
        for key in ("database", "authentication", "deployment"):
            payload.pop(key)
        assert validate_requirements(payload) == (True, [])
        payload.update(database=None, authentication=None, deployment=None)
        assert validate_requirements(payload) == (True, [])

    def test_every_project_type_accepted(self, payload: dict):
        for project_type in PROJECT_TYPES:
            payload["type"] = project_type
            assert validate_requirements(payload)[0] is True

    def test_unknown_type_rejected(self, payload: dict):
        payload["type"] = "desktop"
        ok, errors = validate_requirements(payload)
        assert ok is False
        assert errors == [{"field": "type", "message": "Invalid project type"}]

    def test_missing_required_fields(self):
        ok, errors = validate_requirements({})
        assert ok is False
        assert [e["field"] for e in errors] == ["name", "description", "type", "framework", "features"]
        assert errors[0]["message"] == "Project name is required"

    def test_blank_name_rejected(self, payload: dict):
        payload["name"] = "   "
        ok, errors = validate_requirements(payload)
        assert ok is False
        assert errors == [{"field": "name", "message": "Project name is required"}]

    def test_features_must_be_array(self, payload: dict):
        payload["features"] = "auth"
        ok, errors = validate_requirements(payload)
        assert ok is False
        assert errors == [{"field": "features", "message": "Features must be an array"}]

    def test_authentication_must_be_boolean(self, payload: dict):
        payload["authentication"] = "yes"
        ok, errors = validate_requirements(payload)
        assert ok is False
        assert errors[0]["field"] == "authentication"

    def test_non_object_body(self):
        for body in (None, [], "text"):
            ok, errors = validate_requirements(body)
            assert ok is False
            assert errors[0]["field"] == "body"


class TestRequirementsFromPayload:
    def test_fields_copied(self, payload: dict):
        req = Requirements.from_payload(payload)
        assert req.name == "Task Tracker"
        assert req.type == "fullstack"
        assert req.features == ("Task CRUD", "Email Notifications")
        assert req.database == "postgresql"
        assert req.authentication is True
        assert req.deployment == "docker"

    def test_empty_optionals_become_none(self, payload: dict):
        payload.update(database="", deployment="")
        payload.pop("authentication")
        req = Requirements.from_payload(payload)
        assert req.database is None
        assert req.deployment is None
        assert req.authentication is None
