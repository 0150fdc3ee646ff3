# portal/invportal/client/resource.py
"""Generic REST resource bound to one backend route."""

from __future__ import annotations

from typing import Any, List, Union

from .http import BackendClient, unwrap, unwrap_list

Key = Union[int, str]


class Resource:
    def __init__(self, client: BackendClient, route: str) -> None:
        self.client = client
        self.route = route.rstrip("/")

    def _path(self, *parts: Key) -> str:
        return "/".join([self.route, *(str(p) for p in parts)])

    # --- reads ---------------------------------------------------------

    def index(self) -> Any:
        return self.client.get(self.route)

    def show(self, id: Key) -> Any:
        return self.client.get(self._path(id))

    def show_with_2_parameters(self, first: Key, second: Key) -> Any:
        return self.client.get(self._path(first, second))

    def show_with_3_parameters(self, first: Key, second: Key, third: Key) -> Any:
        return self.client.get(self._path(first, second, third))

    # --- writes --------------------------------------------------------

    def store(self, payload: Any) -> Any:
        return self.client.post(self.route, json=payload)

    def update(self, id: Key, payload: Any) -> Any:
        return self.client.put(self._path(id), json=payload)

    def patch(self, id: Key, payload: Any) -> Any:
        return self.client.patch(self._path(id), json=payload)

    def patch_no_payload(self, id: Key) -> Any:
        return self.client.patch(self._path(id))

    def destroy(self, id: Key) -> Any:
        return self.client.delete(self._path(id))

    def destroy_2_parameters(self, id: Key, second: Key) -> Any:
        return self.client.delete(self._path(id, second))

    # --- unwrapped conveniences -----------------------------------------

    def list(self) -> List[Any]:
        return unwrap_list(self.index())

    def get(self, id: Key) -> Any:
        return unwrap(self.show(id))
