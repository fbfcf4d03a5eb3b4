"""Tool that asks the documentation assistant a question."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, List

from canyon.humanitec import HumanitecClient, checked
from canyon.mcp_server import Tool
from canyon.mcp_types import Content, text_content_with_audience

_NAME = "query_humanitec_documentation"
_DESCRIPTION = (
    "This tool provides access to an LLM that has been fine tuned on Humanitec Platform "
    "Orchestrator documentation. This tool provides access to an expert in Humanitec platform "
    "engineer. Use this tool whenever you are unsure, need more up to date documentation, or "
    "hallucination is a risk."
)
_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {"query": {"type": "string"}},
    "required": ["query"],
}


def _query(arguments: Dict[str, Any]) -> List[Content]:
    client = HumanitecClient.from_current_token()
    query = arguments.get("query")
    if not isinstance(query, str):
        raise TypeError("argument 'query' must be a string")
    response = checked(lambda: client.query_ai_docs(query), HTTPStatus.OK)
    data = response.data if isinstance(response.data, dict) else {}
    answer = data.get("answer")
    return [text_content_with_audience(answer if isinstance(answer, str) else "", "assistant")]


def new_kapa_docs_tool() -> Tool:
    """Build the tool that answers questions from the product documentation."""
    return Tool(name=_NAME, description=_DESCRIPTION, input_schema=_SCHEMA, call=_query)