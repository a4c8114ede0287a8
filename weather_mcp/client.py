import json
import os
import queue
import subprocess
import sys
import threading
import logging
from typing import Any, Dict, List, Optional

from . import config

PROTOCOL_VERSION = "2024-11-05"
SERVER_COMMAND = [sys.executable, "-m", "weather_mcp.server"]


class ToolClientError(Exception):
    pass


def extract_text(result: Any) -> str:
    """Join the text items of an MCP tools/call result."""
    if not isinstance(result, dict):
        raise ToolClientError(f"Malformed tools/call result: {result!r}")
    content = result.get("content") or []
    text = "\n".join(
        item.get("text", "") for item in content
        if isinstance(item, dict) and item.get("type", "text") == "text"
    )
    if result.get("isError"):
        raise ToolClientError(text or "Tool call failed")
    return text


class WeatherToolClient:
    """JSON-RPC 2.0 client that runs the weather MCP server over stdio.

    Usage:
        with WeatherToolClient() as client:
            text = client.call_tool("get_forecast", {"latitude": 52.52, "longitude": 13.41})
    """

    def __init__(self, command: Optional[List[str]] = None, cwd: str = ".", timeout: float = 60.0,
                 log_file: Optional[str] = None):
        self.command = command or list(SERVER_COMMAND)
        self.cwd = cwd
        self.timeout = timeout
        self.proc: Optional[subprocess.Popen] = None
        self._id = 0
        self._pending: Dict[int, queue.Queue] = {}
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._reader_thread: Optional[threading.Thread] = None

        self.logger = logging.getLogger("weather_mcp.client")
        self.log_file = log_file or os.path.join(config.LOG_DIR, "mcp_server.log")
        config.attach_file_handler(self.logger, self.log_file)

    def __enter__(self) -> "WeatherToolClient":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    @property
    def running(self) -> bool:
        return self.proc is not None and self.proc.poll() is None

    def start(self) -> None:
        if self.proc:
            return
        try:
            self.proc = subprocess.Popen(
                self.command,
                cwd=self.cwd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
            )
        except OSError as e:
            raise ToolClientError(f"Could not start MCP server {self.command!r}: {e}") from e

        self._reader_thread = threading.Thread(target=self._reader_loop, daemon=True)
        self._reader_thread.start()
        threading.Thread(target=self._stderr_loop, daemon=True).start()

        try:
            self._send_request("initialize", {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "weather-mcp-client", "version": "0.1.0"},
            })
            self._send_notification("notifications/initialized")
        except ToolClientError:
            self.stop()
            raise
        self.logger.info(f"[client] MCP server started: {' '.join(self.command)}")

    def stop(self) -> None:
        if not self.proc:
            return
        proc, self.proc = self.proc, None
        if proc.stdin:
            try:
                proc.stdin.close()
            except OSError:
                pass
        proc.terminate()
        try:
            proc.wait(timeout=2)
        except subprocess.TimeoutExpired:
            proc.kill()
        self.logger.info("[client] MCP server stopped")

    def _stderr_loop(self) -> None:
        proc = self.proc
        if not proc or not proc.stderr:
            return
        with proc.stderr:
            for line in iter(proc.stderr.readline, b""):
                msg = line.decode("utf-8", errors="replace").rstrip()
                if msg:
                    self.logger.info(f"[MCP server] {msg}")

    def _reader_loop(self) -> None:
        """Read newline-delimited JSON-RPC messages from the server's stdout."""
        proc = self.proc
        if not proc or not proc.stdout:
            return
        for line in iter(proc.stdout.readline, b""):
            text = line.decode("utf-8", errors="replace").strip()
            if not text:
                continue
            try:
                message = json.loads(text)
            except json.JSONDecodeError:
                self.logger.info(f"[MCP server output] {text}")
                continue
            if isinstance(message, dict):
                self._handle_message(message)
        # Wake anyone still waiting so they fail fast instead of timing out
        with self._lock:
            waiting = list(self._pending.values())
        for q in waiting:
            q.put({"error": {"message": "MCP server closed the connection"}})

    def _handle_message(self, message: Dict[str, Any]) -> None:
        msg_id = message.get("id")
        if msg_id is None:
            # Notifications (logging, progress) are not used by this client
            return
        with self._lock:
            q = self._pending.get(msg_id)
        if q:
            q.put(message)
        else:
            self.logger.warning(f"[client] Response for unknown id: {msg_id}")

    def _next_id(self) -> int:
        with self._lock:
            self._id += 1
            return self._id

    def _write_message(self, message: Dict[str, Any]) -> None:
        if not self.running:
            raise ToolClientError("MCP server is not running")
        payload = (json.dumps(message) + "\n").encode("utf-8")
        try:
            with self._write_lock:
                self.proc.stdin.write(payload)
                self.proc.stdin.flush()
        except OSError as e:
            raise ToolClientError(f"Failed to write to MCP server: {e}") from e

    def _send_notification(self, method: str, params: Any = None) -> None:
        message: Dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            message["params"] = params
        self._write_message(message)

    def _send_request(self, method: str, params: Any = None) -> Any:
        """Send a request and block until its response arrives."""
        req_id = self._next_id()
        message: Dict[str, Any] = {"jsonrpc": "2.0", "id": req_id, "method": method}
        if params is not None:
            message["params"] = params

        q: queue.Queue = queue.Queue()
        with self._lock:
            self._pending[req_id] = q
        try:
            self._write_message(message)
            try:
                response = q.get(timeout=self.timeout)
            except queue.Empty:
                raise ToolClientError(f"Timeout waiting for response to {method}") from None
        finally:
            with self._lock:
                self._pending.pop(req_id, None)

        if "error" in response:
            error = response["error"] or {}
            raise ToolClientError(error.get("message", "Unknown error"))
        return response.get("result")

    def list_tools(self) -> List[Dict[str, Any]]:
        result = self._send_request("tools/list", {})
        return (result or {}).get("tools", [])

    def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """Call a tool and return its text, raising ToolClientError on tool errors."""
        self.logger.info(f"[client] tools/call {tool_name} {arguments}")
        result = self._send_request("tools/call", {"name": tool_name, "arguments": arguments})
        return extract_text(result)
