#!/usr/bin/env python3
"""Golden path demo for TaskDesk (create, update, delete, audit trail)."""

from __future__ import annotations

import base64
import json
import os
import sys
from typing import Any
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


def _env(name: str, default: str | None = None) -> str | None:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value


class HttpClient:
    def __init__(self, base_url: str, username: str, password: str) -> None:
        self.base_url = base_url.rstrip("/")
        token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        self.headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Authorization": f"Basic {token}",
        }

    def request_json(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        query: dict[str, Any] | None = None,
        timeout: float = 10.0,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        if query:
            query = {k: v for k, v in query.items() if v is not None}
            if query:
                url = f"{url}?{urlencode(query)}"

        data = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")

        req = Request(url, data=data, method=method)
        for key, value in self.headers.items():
            req.add_header(key, value)

        try:
            with urlopen(req, timeout=timeout) as response:
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"{method} {url} failed: {exc.code} {exc.reason}: {detail}") from None

        if not raw:
            return {}
        return json.loads(raw.decode("utf-8"))


def main() -> int:
    taskdesk_url = _env("TASKDESK_URL", "http://localhost:5000")
    username = _env("TASKDESK_AUTH_USERNAME", "admin")
    password = _env("TASKDESK_AUTH_PASSWORD", "password123")

    client = HttpClient(taskdesk_url, username, password)

    print("Checking health...")
    health = client.request_json("GET", "/api/health")
    if health.get("status") != "OK":
        raise RuntimeError(f"Unexpected health response: {health}")

    print("Creating task...")
    created = client.request_json(
        "POST",
        "/api/tasks",
        payload={"title": "Golden path demo", "description": "Created by the smoke run"},
    )
    task_id = str(created.get("id") or "")
    if not task_id:
        raise RuntimeError(f"Missing id in response: {created}")
    print(f"Task created: {task_id}")

    print("Updating description...")
    updated = client.request_json(
        "PUT",
        f"/api/tasks/{task_id}",
        payload={"title": "Golden path demo", "description": "Updated by the smoke run"},
    )
    if updated.get("task", {}).get("description") != "Updated by the smoke run":
        raise RuntimeError(f"Update not applied: {updated}")

    print("Deleting task...")
    client.request_json("DELETE", f"/api/tasks/{task_id}")

    logs = client.request_json(
        "GET",
        "/api/logs",
        query={"search": task_id, "sortBy": "timestamp", "sortOrder": "asc", "limit": 100},
    ).get("logs", [])

    trail = [log.get("action") for log in logs if log.get("taskId") == task_id]
    if trail != ["Create Task", "Update Task", "Delete Task"]:
        raise RuntimeError(f"Unexpected audit trail for task {task_id}: {trail}")

    update_entry = next(log for log in logs if log.get("action") == "Update Task")
    if update_entry.get("updatedContent") != {"description": "Updated by the smoke run"}:
        raise RuntimeError(f"Update entry should carry only the changed field: {update_entry}")

    print("Golden path complete: task created, updated, deleted, audit trail recorded.")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        raise
