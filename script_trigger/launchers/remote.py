"""RemoteLauncher — runs scripts on a remote node through its agent's HTTP API.

Every capability of ``Launcher`` is one RPC to the node agent
(``script_trigger.agent``).  Process execution is asynchronous on the
agent side: the launcher starts the process, then polls for output and exit
status until the process ends, the cycle is cancelled or the timeout
expires.

Replies are validated against the agent's response schemas, so a node URL
that answers with something else (a proxy page, another service) surfaces
as ``RemoteNodeError`` like any transport failure.
"""

from __future__ import annotations

import threading
import time
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from script_trigger.agent.schemas import (
    HEADER_API_TOKEN,
    ExistsResponse,
    HealthResponse,
    ProcessStartedResponse,
    ProcessStateResponse,
    ReadFileResponse,
    WriteScriptResponse,
)
from script_trigger.exceptions import (
    ExecutionCancelledError,
    ExecutionTimeoutError,
    RemoteNodeError,
)
from script_trigger.launchers.base import Launcher, OutputListener
from script_trigger.logging import get_logger

log = get_logger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class RemoteLauncher(Launcher):
    """Launcher backed by a node agent.

    Usage::

        with RemoteLauncher("http://build-node-3:40100", api_token="s3cret") as launcher:
            path = launcher.write_script("exit 3", ".sh")
            code = launcher.launch(["sh", "-xe", path], launcher.root, print)

    Args:
        base_url:      Agent address.
        api_token:     Sent in ``X-Script-Trigger-Token`` when set.
        timeout:       Per-request HTTP timeout in seconds.
        poll_interval: Seconds between two process state requests.
        root:          Working directory on the node.  Defaults to the agent root.
        temp_prefix:   File name prefix of script artifacts created on the node.
        client:        Pre-built httpx client (tests inject a ``TestClient``).
    """

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        timeout: float = 30.0,
        poll_interval: float = 0.5,
        root: str | None = None,
        temp_prefix: str = "script_trigger",
        client: httpx.Client | None = None,
    ) -> None:
        headers: dict[str, str] = {}
        if api_token:
            headers[HEADER_API_TOKEN] = api_token

        self._base_url = base_url
        self._poll_interval = poll_interval
        self._root = root
        self._temp_prefix = temp_prefix
        self._node_info: HealthResponse | None = None
        if client is None:
            self._http = httpx.Client(base_url=base_url, headers=headers, timeout=timeout)
            self._owns_client = True
        else:
            self._http = client
            self._http.headers.update(headers)
            self._owns_client = False

    # ------------------------------------------------------------------
    # Node description
    # ------------------------------------------------------------------

    def node_info(self) -> HealthResponse:
        """GET /health, fetched once per launcher."""
        if self._node_info is None:
            self._node_info = self._call("GET", "/health", HealthResponse)
        return self._node_info

    @property
    def is_unix(self) -> bool:
        return self.node_info().path_separator == ":"

    @property
    def root(self) -> str:
        if self._root is not None:
            return self._root
        return self.node_info().root

    # ------------------------------------------------------------------
    # Filesystem
    # ------------------------------------------------------------------

    def exists(self, path: str) -> bool:
        return self._call("POST", "/files/exists", ExistsResponse, json={"path": path}).exists

    def read_lines(self, path: str) -> list[str]:
        return self._call("POST", "/files/read", ReadFileResponse, json={"path": path}).lines

    def write_script(self, content: str, extension: str) -> str:
        body = {"content": content, "extension": extension, "prefix": self._temp_prefix}
        return self._call("POST", "/scripts", WriteScriptResponse, json=body).path

    def delete(self, path: str) -> None:
        try:
            self._request("POST", "/scripts/delete", json={"path": path})
        except RemoteNodeError as exc:
            log.warning("script_cleanup_failed", path=path, node=self._base_url, error=exc.describe())

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def launch(
        self,
        command: list[str],
        cwd: str,
        output: OutputListener,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> int:
        started = self._call(
            "POST",
            "/processes",
            ProcessStartedResponse,
            json={"command": command, "cwd": cwd},
        )
        process_id = started.process_id
        log.info(
            "script_launched",
            node=self._base_url,
            process_id=process_id,
            pid=started.pid,
            command=command,
        )

        deadline = time.monotonic() + timeout if timeout is not None else None
        offset = 0
        try:
            while True:
                state = self._call(
                    "GET",
                    f"/processes/{process_id}",
                    ProcessStateResponse,
                    params={"offset": offset},
                )
                for line in state.lines:
                    output(line)
                offset = state.offset
                if state.exit_code is not None:
                    log.info("script_exited", process_id=process_id, exit_code=state.exit_code)
                    return state.exit_code
                if cancel_event is not None and cancel_event.is_set():
                    raise ExecutionCancelledError(
                        "Script execution was interrupted",
                        context={"command": command, "node": self._base_url},
                    )
                if deadline is not None and time.monotonic() > deadline:
                    raise ExecutionTimeoutError(command, timeout)  # type: ignore[arg-type]
                if cancel_event is not None:
                    cancel_event.wait(self._poll_interval)
                else:
                    time.sleep(self._poll_interval)
        finally:
            self._release(process_id)

    def _release(self, process_id: str) -> None:
        """Kill (if still running) and forget the process on the agent."""
        try:
            self._request("DELETE", f"/processes/{process_id}")
        except RemoteNodeError as exc:
            log.warning("process_release_failed", process_id=process_id, error=exc.describe())

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _call(
        self, method: str, path: str, response_model: type[ResponseT], **kwargs: Any
    ) -> ResponseT:
        """Send a request and validate the reply against *response_model*."""
        resp = self._request(method, path, **kwargs)
        try:
            return response_model.model_validate_json(resp.content)
        except ValueError as exc:
            log.warning(
                "remote_response_invalid",
                method=method,
                path=path,
                content_type=resp.headers.get("content-type"),
            )
            raise RemoteNodeError(
                f"Node agent at {self._base_url} sent an invalid reply to {method} {path}",
                cause=exc,
                context={"node": self._base_url, "status": resp.status_code},
            ) from exc

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._http.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            log.warning(
                "remote_request_failed",
                method=method,
                path=path,
                status=exc.response.status_code,
                error=detail,
            )
            raise RemoteNodeError(
                f"Node agent rejected {method} {path}: {detail}",
                cause=exc,
                context={"node": self._base_url, "status": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("remote_request_failed", method=method, path=path, error=str(exc))
            raise RemoteNodeError(
                f"Node agent at {self._base_url} is unreachable",
                cause=exc,
                context={"node": self._base_url},
            ) from exc
        return resp


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)
    return str(body)
