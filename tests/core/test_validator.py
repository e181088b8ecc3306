"""
Unit Tests for Schema Validation

Tests for host request and document validation.
"""

import pytest

from icon_toolkit.core.schemas.validator import (
    DOCUMENT_SCHEMA_VERSION,
    REQUEST_SCHEMAS,
    ValidationError,
    validate_document,
    validate_request,
)


class TestValidateRequest:
    """Tests for validate_request function."""

    @pytest.fixture
    def consolidate_request(self) -> dict:
        return {
            "type": "consolidate",
            "data": {
                "icons": [
                    {"id": "1:2", "name": "home", "type": "VECTOR",
                     "width": 24, "height": 24, "page": "Page 1"},
                ],
                "scope": "current-page",
                "currentPageName": "Page 1",
            },
        }

    def test_validate_when_scan_without_data_then_no_error(self):
        """scan carries no payload."""
        validate_request({"type": "scan"})

    def test_validate_when_valid_consolidate_then_no_error(self, consolidate_request):
        validate_request(consolidate_request)

    def test_validate_when_unknown_type_then_raises_error(self):
        """Unknown message types are rejected on the type path."""
        with pytest.raises(ValidationError, match="Unknown request type") as exc_info:
            validate_request({"type": "explode"})

        assert exc_info.value.path == "type"

    def test_validate_when_not_a_dict_then_raises_error(self):
        with pytest.raises(ValidationError, match="must be an object"):
            validate_request(["scan"])

    def test_validate_when_missing_data_then_raises_error(self):
        with pytest.raises(ValidationError, match="requires a data payload"):
            validate_request({"type": "smart-rename-icon"})

    def test_validate_when_bad_scope_then_reports_data_path(self, consolidate_request):
        """Payload errors carry the JSON path below data."""
        consolidate_request["data"]["scope"] = "everywhere"

        with pytest.raises(ValidationError) as exc_info:
            validate_request(consolidate_request)

        assert exc_info.value.path == "data.scope"
        assert exc_info.value.errors

    def test_validate_when_icon_missing_page_then_raises_error(self, consolidate_request):
        del consolidate_request["data"]["icons"][0]["page"]

        with pytest.raises(ValidationError, match="page"):
            validate_request(consolidate_request)

    def test_validate_when_bad_mark_type_then_raises_error(self):
        message = {"type": "mark-icon", "data": {"iconId": "1:2", "markType": "delete"}}

        with pytest.raises(ValidationError) as exc_info:
            validate_request(message)

        assert exc_info.value.path == "data.markType"

    def test_validate_when_bad_sizing_mode_then_raises_error(self):
        message = {
            "type": "swap-icons",
            "data": {"originalIcon": {"id": "1:2"}, "replacementIcon": {"id": "1:3"}, "sizingMode": "stretch"},
        }

        with pytest.raises(ValidationError) as exc_info:
            validate_request(message)

        assert exc_info.value.path == "data.sizingMode"

    def test_validate_when_imported_icon_nested_kind_unknown_then_raises_error(self):
        message = {
            "type": "add-icon-to-library",
            "data": {
                "fileName": "home.svg",
                "icon": {"type": "FRAME", "children": [{"type": "PAGE"}]},
            },
        }

        with pytest.raises(ValidationError) as exc_info:
            validate_request(message)

        assert exc_info.value.path == "data.icon.children.0.type"

    def test_request_schemas_when_listed_then_every_schema_file_exists(self):
        """Every referenced schema name resolves to a bundled file."""
        from pathlib import Path
        import icon_toolkit.core.schemas.validator as validator

        schema_dir = Path(validator.__file__).parent
        for name in filter(None, REQUEST_SCHEMAS.values()):
            assert (schema_dir / f"{name}.schema.json").exists(), name


class TestValidateDocument:
    """Tests for validate_document function."""

    @pytest.fixture
    def valid_document(self) -> dict:
        return {
            "schemaVersion": DOCUMENT_SCHEMA_VERSION,
            "name": "Design",
            "pages": [
                {
                    "id": "0:1",
                    "name": "Page 1",
                    "children": [
                        {
                            "id": "1:2",
                            "name": "home",
                            "type": "FRAME",
                            "absoluteBoundingBox": {"width": 24, "height": 24},
                            "children": [{"id": "1:3", "name": "p", "type": "VECTOR"}],
                        }
                    ],
                }
            ],
        }

    def test_validate_when_valid_document_then_no_error(self, valid_document):
        validate_document(valid_document)

    def test_validate_when_wrong_version_then_raises_error(self, valid_document):
        valid_document["schemaVersion"] = 99

        with pytest.raises(ValidationError, match="Unsupported document schema version"):
            validate_document(valid_document)

    def test_validate_when_nested_node_type_unknown_then_raises_error(self, valid_document):
        """Nested nodes are validated recursively."""
        valid_document["pages"][0]["children"][0]["children"][0]["type"] = "PAGE"

        with pytest.raises(ValidationError):
            validate_document(valid_document)

    def test_validate_when_negative_width_then_raises_error(self, valid_document):
        valid_document["pages"][0]["children"][0]["absoluteBoundingBox"]["width"] = -1

        with pytest.raises(ValidationError):
            validate_document(valid_document)
