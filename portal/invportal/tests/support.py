"""Fake inventory backend and sample users shared by the portal tests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx


@dataclass
class Call:
    method: str
    path: str
    json: Any
    headers: httpx.Headers


Reply = Union[Tuple[int, Any], Callable[[Call], Tuple[int, Any]]]


class FakeBackend:
    """
    Canned responses keyed by (method, path), served through httpx.MockTransport.

    Unknown routes answer 404 so a missing stub shows up as a failed page.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Reply] = {}
        self.calls: List[Call] = []
        self.transport = httpx.MockTransport(self._handle)

    def on(self, method: str, path: str, status: int = 200, json: Any = None) -> None:
        self.routes[(method.upper(), path)] = (status, json)

    def on_call(self, method: str, path: str, reply: Callable[[Call], Tuple[int, Any]]) -> None:
        self.routes[(method.upper(), path)] = reply

    def collection(self, path: str, rows: List[Dict[str, Any]]) -> None:
        self.on("GET", path, json={"data": rows})

    def calls_to(self, method: str, path: str) -> List[Call]:
        return [c for c in self.calls if c.method == method.upper() and c.path == path]

    def last(self, method: str, path: str) -> Optional[Call]:
        calls = self.calls_to(method, path)
        return calls[-1] if calls else None

    def _handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        call = Call(request.method, request.url.path, body, request.headers)
        self.calls.append(call)

        reply = self.routes.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, json={"message": "Not found."})
        status, payload = reply(call) if callable(reply) else reply
        if payload is None:
            return httpx.Response(status)
        return httpx.Response(status, json=payload)


ADMIN_USER = {
    "id": 1,
    "name": "Ada Reyes",
    "email": "admin@nod.gov.ph",
    "user_type": "system_administrator",
    "department_id": None,
    "permissions": None,
}

EMPLOYEE_USER = {
    "id": 2,
    "name": "Ben Santos",
    "email": "ben@nod.gov.ph",
    "user_type": "employee",
    "department_id": 3,
    "permissions": ["items", "departments"],
}
