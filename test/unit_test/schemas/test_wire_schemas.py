from __future__ import annotations

import pytest
from pydantic import ValidationError

from mcp_bridge.schemas import (
    CallToolRequest,
    CallToolResult,
    ContentElement,
    ContentKind,
    RemoteServerConfig,
    SchemaKind,
    SchemaNode,
    ToolDescription,
)


class TestSchemaNode:
    """Lenient parsing of JSON-Schema-like nodes."""

    def test_full_node(self) -> None:
        node = SchemaNode.model_validate(
            {
                "type": "object",
                "properties": {"when": {"type": "string", "format": "date-time"}},
                "required": ["when"],
                "description": "An event",
                "$schema": "http://json-schema.org/draft-07/schema#",
                "additionalProperties": False,
            }
        )
        assert node.kind is SchemaKind.OBJECT
        assert node.properties is not None and node.properties["when"].format == "date-time"
        assert node.required_set() == {"when"}

    def test_properties_imply_object(self) -> None:
        assert SchemaNode.model_validate({"properties": {}}).kind is SchemaKind.OBJECT

    def test_type_list_uses_first_non_null(self) -> None:
        assert SchemaNode.model_validate({"type": ["null", "integer"]}).kind is SchemaKind.INTEGER

    def test_unknown_type_is_unset(self) -> None:
        assert SchemaNode.model_validate({"type": "null"}).kind is None

    def test_tuple_items_ignored(self) -> None:
        node = SchemaNode.model_validate({"type": "array", "items": [{"type": "string"}]})
        assert node.items is None

    def test_invalid_property(self) -> None:
        with pytest.raises(ValidationError):
            SchemaNode.model_validate({"properties": {"a": 1}})

    def test_to_wire_omits_unset(self) -> None:
        node = SchemaNode.model_validate({"type": "array", "items": {"type": "string"}})
        assert node.to_wire() == {"type": "array", "items": {"type": "string"}}


class TestContentElement:
    @pytest.mark.parametrize(
        ("declared", "kind"),
        [
            ("text", ContentKind.TEXT),
            ("data", ContentKind.DATA),
            ("jsondata", ContentKind.DATA),
            ("resource", ContentKind.RESOURCE),
            ("resource_link", ContentKind.RESOURCE),
            ("image", ContentKind.IMAGE),
            ("", ContentKind.EMPTY),
            ("audio", ContentKind.OTHER),
        ],
    )
    def test_kind(self, declared: str, kind: ContentKind) -> None:
        assert ContentElement(type=declared).kind is kind

    def test_mime_normalized(self) -> None:
        element = ContentElement.model_validate({"type": "data", "mimeType": "Application/JSON; charset=utf-8"})
        assert element.mime == "application/json"

    def test_non_string_data_dumped(self) -> None:
        assert ContentElement(type="data", data={"a": 1}).payload() == '{"a": 1}'

    def test_extra_keys_retained(self) -> None:
        element = ContentElement.model_validate({"type": "resource", "uri": "file:///x"})
        assert element.to_wire() == {"type": "resource", "uri": "file:///x"}


class TestMessages:
    def test_tool_description_defaults(self) -> None:
        tool = ToolDescription.model_validate({"name": "echo", "inputSchema": None})
        assert tool.input_schema == {}
        assert tool.output_schema is None

    def test_request_arguments_default(self) -> None:
        assert CallToolRequest.model_validate({"name": "t", "arguments": None}).arguments == {}

    def test_result_nulls(self) -> None:
        result = CallToolResult.model_validate({"content": None, "isError": None})
        assert result.content == [] and result.is_error is False

    def test_text_result(self) -> None:
        result = CallToolResult.text_result("oops", is_error=True)
        assert result.is_error and result.content[0].text == "oops"


class TestRemoteServerConfig:
    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RemoteServerConfig.model_validate({"name": "x", "endpoint_url": "http://mock", "bogus": 1})

    def test_camel_case_aliases(self) -> None:
        cfg = RemoteServerConfig.model_validate({"name": "x", "endpointUrl": "http://mock", "authToken": "t"})
        assert cfg.endpoint_url == "http://mock" and cfg.auth_token == "t"
