"""Request, response and content types of the model context protocol."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from canyon.jsonrpc import JsonRpcResponse

_VERB = re.compile(r"%(%|v)")


def _fields(data: Any, name: str) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"json: cannot unmarshal {type(data).__name__} into Go value of type {name}")
    return {key.lower(): value for key, value in data.items() if isinstance(key, str)}


def _string(fields: Dict[str, Any], key: str) -> str:
    value = fields.get(key.lower())
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(
            f"json: cannot unmarshal {type(value).__name__} into field {key} of type string"
        )
    return value


def _object(fields: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = fields.get(key.lower())
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(
            f"json: cannot unmarshal {type(value).__name__} into field {key} of type object"
        )
    return dict(value)


def _annotations(value: Optional["Annotations"], out: Dict[str, Any]) -> Dict[str, Any]:
    if value is not None:
        out["annotations"] = value.to_dict()
    return out


@dataclass
class Annotations:
    audience: Optional[List[str]] = None
    priority: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "audience": list(self.audience) if self.audience is not None else None
        }
        if self.priority:
            out["priority"] = self.priority
        return out


@dataclass
class TextContent:
    text: str = ""
    annotations: Optional[Annotations] = None

    def to_dict(self) -> Dict[str, Any]:
        return _annotations(self.annotations, {"type": "text", "text": self.text})


@dataclass
class ImageContent:
    mime_type: str = ""
    data: str = ""
    annotations: Optional[Annotations] = None

    def to_dict(self) -> Dict[str, Any]:
        return _annotations(
            self.annotations, {"type": "image", "mimeType": self.mime_type, "data": self.data}
        )


@dataclass
class TextResourceContent:
    uri: str = ""
    text: str = ""
    mime_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"uri": self.uri, "text": self.text}
        if self.mime_type is not None:
            out["mimeType"] = self.mime_type
        return out


@dataclass
class BlobResourceContent:
    uri: str = ""
    blob: Optional[str] = None
    mime_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"uri": self.uri, "blob": self.blob}
        if self.mime_type is not None:
            out["mimeType"] = self.mime_type
        return out


ResourceContent = Union[TextResourceContent, BlobResourceContent]


def _union_dict(value: Any) -> Dict[str, Any]:
    return {} if value is None else value.to_dict()


@dataclass
class EmbeddedResource:
    resource: Optional[ResourceContent] = None
    annotations: Optional[Annotations] = None

    def to_dict(self) -> Dict[str, Any]:
        return _annotations(
            self.annotations, {"type": "resource", "resource": _union_dict(self.resource)}
        )


Content = Union[TextContent, ImageContent, EmbeddedResource]


def text_content(text: str, *args: Any) -> TextContent:
    """Text content, formatted with ``args`` in printf style when any are given."""
    if args:
        template = _VERB.sub(lambda m: "%%" if m.group(1) == "%" else "%s", text)
        text = template % args
    return TextContent(text=text)


def text_content_with_audience(text: str, audience: str) -> TextContent:
    """Text content addressed to a single audience."""
    return TextContent(text=text, annotations=Annotations(audience=[audience]))


@dataclass
class Implementation:
    name: str = ""
    version: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "version": self.version}


@dataclass
class ServerCapabilities:
    tools_list_changed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        tools: Dict[str, Any] = {"listChanged": True} if self.tools_list_changed else {}
        return {"logging": {}, "prompts": {}, "tools": tools, "resources": {}}


@dataclass
class InitializeRequest:
    protocol_version: str = ""
    client_info: Implementation = field(default_factory=Implementation)
    capabilities: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "InitializeRequest":
        fields = _fields(data, "InitializeRequest")
        info = _fields(fields.get("clientinfo"), "Implementation")
        return cls(
            protocol_version=_string(fields, "protocolVersion"),
            client_info=Implementation(
                name=_string(info, "name"), version=_string(info, "version")
            ),
            capabilities=_object(fields, "capabilities"),
        )


@dataclass
class InitializeResponse:
    protocol_version: str = ""
    server_info: Implementation = field(default_factory=Implementation)
    capabilities: ServerCapabilities = field(default_factory=ServerCapabilities)
    instructions: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "protocolVersion": self.protocol_version,
            "serverInfo": self.server_info.to_dict(),
            "capabilities": self.capabilities.to_dict(),
        }
        if self.instructions:
            out["instructions"] = self.instructions
        return out


@dataclass
class ToolResponse:
    name: str = ""
    description: str = ""
    input_schema: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class ListToolsRequest:
    cursor: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ListToolsRequest":
        return cls(cursor=_string(_fields(data, "ListToolsRequest"), "cursor"))


def _listing(next_cursor: str, key: str, items: List[Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if next_cursor:
        out["nextCursor"] = next_cursor
    out[key] = [item.to_dict() for item in items]
    return out


@dataclass
class ListToolsResponse:
    tools: List[ToolResponse] = field(default_factory=list)
    next_cursor: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return _listing(self.next_cursor, "tools", self.tools)


@dataclass
class CallToolRequest:
    name: str = ""
    arguments: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "CallToolRequest":
        fields = _fields(data, "CallToolRequest")
        return cls(name=_string(fields, "name"), arguments=_object(fields, "arguments"))


@dataclass
class CallToolResponse:
    contents: List[Content] = field(default_factory=list)
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.is_error:
            out["is_error"] = True
        out["content"] = [_union_dict(item) for item in self.contents]
        return out


@dataclass
class PromptArgument:
    name: str = ""
    description: str = ""
    required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.description:
            out["description"] = self.description
        if self.required:
            out["required"] = True
        return out


@dataclass
class Prompt:
    name: str = ""
    description: str = ""
    arguments: List[PromptArgument] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.description:
            out["description"] = self.description
        if self.arguments:
            out["arguments"] = [argument.to_dict() for argument in self.arguments]
        return out


@dataclass
class ListPromptsRequest:
    cursor: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ListPromptsRequest":
        return cls(cursor=_string(_fields(data, "ListPromptsRequest"), "cursor"))


@dataclass
class ListPromptsResponse:
    prompts: List[Prompt] = field(default_factory=list)
    next_cursor: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return _listing(self.next_cursor, "prompts", self.prompts)


@dataclass
class GetPromptRequest:
    name: str = ""
    description: str = ""
    arguments: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "GetPromptRequest":
        fields = _fields(data, "GetPromptRequest")
        return cls(
            name=_string(fields, "name"),
            description=_string(fields, "description"),
            arguments=_object(fields, "arguments"),
        )


@dataclass
class PromptMessage:
    role: str = ""
    content: Optional[Content] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": _union_dict(self.content)}


@dataclass
class GetPromptResponse:
    description: str = ""
    messages: List[PromptMessage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "messages": [message.to_dict() for message in self.messages],
        }


@dataclass
class Resource:
    uri: str = ""
    name: str = ""
    description: str = ""
    size: int = 0
    mime_type: str = ""
    annotations: Optional[Annotations] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"uri": self.uri, "name": self.name}
        if self.description:
            out["description"] = self.description
        if self.size:
            out["size"] = self.size
        if self.mime_type:
            out["mimeType"] = self.mime_type
        return _annotations(self.annotations, out)


@dataclass
class ResourceTemplate:
    name: str = ""
    uri_template: str = ""
    description: str = ""
    mime_type: str = ""
    annotations: Optional[Annotations] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "uriTemplate": self.uri_template}
        if self.description:
            out["description"] = self.description
        if self.mime_type:
            out["mimeType"] = self.mime_type
        return _annotations(self.annotations, out)


@dataclass
class ListResourcesRequest:
    cursor: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ListResourcesRequest":
        return cls(cursor=_string(_fields(data, "ListResourcesRequest"), "cursor"))


@dataclass
class ListResourcesResponse:
    resources: List[Resource] = field(default_factory=list)
    next_cursor: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return _listing(self.next_cursor, "resources", self.resources)


@dataclass
class ListResourceTemplatesRequest:
    cursor: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ListResourceTemplatesRequest":
        return cls(cursor=_string(_fields(data, "ListResourceTemplatesRequest"), "cursor"))


@dataclass
class ListResourceTemplatesResponse:
    resource_templates: List[ResourceTemplate] = field(default_factory=list)
    next_cursor: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return _listing(self.next_cursor, "resourceTemplates", self.resource_templates)


@dataclass
class ReadResourceRequest:
    uri: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ReadResourceRequest":
        return cls(uri=_string(_fields(data, "ReadResourceRequest"), "uri"))


@dataclass
class ReadResourceResponse:
    contents: List[ResourceContent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"contents": [_union_dict(item) for item in self.contents]}


@dataclass
class SetLevelRequest:
    level: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "SetLevelRequest":
        return cls(level=_string(_fields(data, "SetLevelRequest"), "level"))


@dataclass
class SetLevelResponse:
    def to_dict(self) -> Dict[str, Any]:
        return {}


@dataclass
class LoggingMessageNotification:
    level: str = ""
    data: str = ""
    logger: str = ""

    def to_response(self) -> JsonRpcResponse:
        params: Dict[str, Any] = {"level": self.level, "data": self.data}
        if self.logger:
            params["logger"] = self.logger
        return JsonRpcResponse.notification("notifications/message", params)


@dataclass
class ToolListChangedNotification:
    def to_response(self) -> JsonRpcResponse:
        return JsonRpcResponse.notification("notifications/tools/list_changed")