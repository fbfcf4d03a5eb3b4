# canyon

`canyon` is a library for building a Model Context Protocol (MCP) server on
JSON-RPC 2.0, together with a set of tools for working with the Humanitec
Platform Orchestrator. The tools let an LLM client check the current session
and list organizations, browse applications and environments, fetch
deployment sets and workload profile schemas, query the Humanitec
documentation assistant, and discover and call "paths" (action pipelines)
defined in an organization.

## Installation

```
pip install .
```

## Modules

- `canyon.jsonrpc`: `JsonRpcRequest`, `JsonRpcResponse`, `JsonRpcError`,
  the `ErrorCode` values and `error_from_exception()`.
  `JsonRpcRequest.from_json()` parses one line of JSON and rejects unknown
  fields; `JsonRpcResponse.to_json()` encodes a response or notification as
  compact JSON.
- `canyon.rpcserver`: `Server` runs a handler on a worker thread. Requests go
  in with `put()`, responses and notifications come out with `get(timeout)`.
  Exceptions raised by the handler become JSON-RPC error responses. `close()`
  (or leaving a `with` block) stops accepting requests; `get()` returns `None`
  once everything has been read.
- `canyon.middleware`: `logging_middleware()` logs each request and its
  outcome; `recovery_middleware()` turns unexpected exceptions into an error
  carrying the traceback, passing JSON-RPC errors through.
- `canyon.mcp_types`: the MCP request, response and content dataclasses, and
  the helpers `text_content()` and `text_content_with_audience()`.
- `canyon.mcp_server`: `Tool`, `McpServer` and `as_handler()`, which routes
  `initialize`, `tools/list`, `tools/call`, `prompts/list`, `prompts/get`,
  `resources/list`, `resources/templates/list`, `resources/read` and
  `logging/setLevel` to the server. Incoming `notifications/...` messages are
  dropped; any other method raises a "method not found" error. An exception
  raised by a tool is returned to the client as a tool result with
  `is_error` set.
- `canyon.humanitec`: `HumanitecClient`, `ApiResponse`, `HumanitecError`,
  `get_current_humanitec_token()` and `checked()`, which turns unexpected
  status codes and network failures into user-facing `HumanitecError`s.
- `canyon.logsetup`: `setup_logging(debug, stream)` sends all logging to a
  stream as single lines formatted by `LineFormatter`.
- `canyon.util`: `pretty_json()`, `coalesce()`, `module_name()` and
  `module_version()`.

### Tools

| Factory | Tool name |
| --- | --- |
| `canyon.tools.app.new_get_deployment_sets_tool()` | `get_humanitec_deployment_sets` |
| `canyon.tools.org.new_list_orgs_and_session_tool()` | `list_humanitec_orgs_and_session` |
| `canyon.tools.org.new_list_apps_and_envs_tool()` | `list_apps_and_envs_for_humanitec_organization` |
| `canyon.tools.org.new_get_workload_profile_schema_tool()` | `get_humanitec_workload_profile_schema` |
| `canyon.tools.kapa.new_kapa_docs_tool()` | `query_humanitec_documentation` |
| `canyon.tools.paths.new_list_paths_tool()` | `list-canyon-paths` |
| `canyon.tools.paths.new_call_path_tool()` | `call-canyon-path` |
| `canyon.tools.dummy.new_dummy_metadata_keys_tool()` | `list_organization_metadata_keys` |

## Authentication

Tools that talk to the Humanitec API build their client with
`HumanitecClient.from_current_token()`. The token is taken from the
`HUMANITEC_TOKEN` environment variable or, if that is unset, from the `token`
key of the YAML file `~/.humctl`. When no token is found, the tool reports
that the user should run `humctl login`.

The API base URL defaults to `https://api.humanitec.io` and can be changed
with `HUMANITEC_API_PREFIX`.

## Example

```python
import sys

from canyon.jsonrpc import JsonRpcRequest
from canyon.logsetup import setup_logging
from canyon.mcp_server import McpServer, as_handler
from canyon.middleware import logging_middleware, recovery_middleware
from canyon.rpcserver import Server
from canyon.tools.dummy import new_dummy_metadata_keys_tool
from canyon.tools.kapa import new_kapa_docs_tool
from canyon.tools.org import new_list_orgs_and_session_tool

setup_logging(False, sys.stderr)

mcp = McpServer(
    instructions="Use these tools for Humanitec-related tasks.",
    tools=[
        new_kapa_docs_tool(),
        new_list_orgs_and_session_tool(),
        new_dummy_metadata_keys_tool(),
    ],
)
handler = logging_middleware(recovery_middleware(as_handler(mcp)))

with Server(handler) as server:
    server.put(JsonRpcRequest.from_json('{"jsonrpc": "2.0", "id": 1, "method": "tools/list"}'))
    print(server.get(timeout=5).to_json())
```

More tools can be added while serving with `McpServer.inject_tools()`, each a
`Tool` with a name, description, JSON input schema and a callable that takes
the arguments and returns a list of content items.

## What this package does not do

- It installs no command. There is nothing that reads requests from standard
  input and writes responses to standard output, nothing that sends a single
  request from the command line, and nothing that prints the configuration
  snippet for an LLM client. The caller feeds `Server` and writes out what
  `get()` returns.
- It ships no ready-made server: the `McpServer` and its list of tools and
  instructions are assembled by the caller, as in the example above.