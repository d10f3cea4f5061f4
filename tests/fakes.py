"""
In-memory stand-ins for the Firebase REST endpoints, used through
`httpx.MockTransport`.
"""

import itertools
from typing import Any

import httpx
import orjson


def _prune(value: Any) -> Any:
    """Drops nulls and empty objects, like the database does on write."""
    if isinstance(value, list):
        value = {str(i): item for i, item in enumerate(value)}
    if isinstance(value, dict):
        pruned = {}
        for key, item in value.items():
            item = _prune(item)
            if item is not None:
                pruned[key] = item
        return pruned or None
    return value


def _export(value: Any) -> Any:
    """Objects with dense integer keys come back as arrays."""
    if not isinstance(value, dict):
        return value
    exported = {key: _export(item) for key, item in value.items()}
    if exported and all(key.isdigit() for key in exported):
        indexes = [int(key) for key in exported]
        if max(indexes) < 2 * len(indexes):
            return [exported.get(str(i)) for i in range(max(indexes) + 1)]
    return exported


def _rank(value: Any) -> tuple:
    if value is None:
        return (0, 0)
    if value is False:
        return (1, 0)
    if value is True:
        return (2, 0)
    if isinstance(value, (int, float)):
        return (3, value)
    if isinstance(value, str):
        return (4, value)
    return (5, 0)


class FakeRealtimeDatabase:
    """
    Minimal Realtime Database REST server keeping its tree in memory.

    Records every request in `requests`.
    """

    def __init__(self):
        self.root: Any = None
        self.requests: list[httpx.Request] = []
        self._push_ids = itertools.count(1)

    # tree helpers

    def get_node(self, segments: list[str]) -> Any:
        node = self.root
        for segment in segments:
            if not isinstance(node, dict):
                return None
            node = node.get(segment)
        return node

    def set_node(self, segments: list[str], value: Any) -> None:
        value = _prune(value)
        if not segments:
            self.root = value
            return
        if not isinstance(self.root, dict):
            self.root = {}
        parents = [self.root]
        for segment in segments[:-1]:
            child = parents[-1].get(segment)
            if not isinstance(child, dict):
                child = parents[-1][segment] = {}
            parents.append(child)
        if value is None:
            parents[-1].pop(segments[-1], None)
        else:
            parents[-1][segments[-1]] = value
        # drop parents left empty
        for depth in range(len(parents) - 1, 0, -1):
            if not parents[depth]:
                parents[depth - 1].pop(segments[depth - 1], None)
        if not self.root:
            self.root = None

    # request handling

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if not path.endswith(".json"):
            return self._json(404, {"error": "Not found"})
        segments = [s for s in path[: -len(".json")].split("/") if s]
        body = orjson.loads(request.content) if request.content else None

        match request.method:
            case "GET":
                return self._json(200, self._query(segments, request.url.params))
            case "PUT":
                self.set_node(segments, body)
                return self._json(200, body)
            case "PATCH":
                if not isinstance(body, dict):
                    return self._json(400, {"error": "Invalid data; couldn't parse JSON object."})
                for key, value in body.items():
                    self.set_node(segments + key.strip("/").split("/"), value)
                return self._json(200, body)
            case "POST":
                key = f"-Fake{next(self._push_ids):015d}"
                self.set_node(segments + [key], body)
                return self._json(200, {"name": key})
            case "DELETE":
                self.set_node(segments, None)
                return self._json(200, None)
        return self._json(405, {"error": "Method not allowed"})

    def _query(self, segments: list[str], params: httpx.QueryParams) -> Any:
        node = self.get_node(segments)
        if params.get("shallow") == "true":
            if isinstance(node, dict):
                return {key: True for key in node}
            return node
        if "orderBy" not in params or not isinstance(node, dict):
            return _export(node)

        order_by = orjson.loads(params["orderBy"])
        if order_by == "$key":
            sort_value = lambda key, child: key  # noqa: E731
        elif order_by == "$value":
            sort_value = lambda key, child: child  # noqa: E731
        else:

            def sort_value(key, child):
                for segment in order_by.split("/"):
                    child = child.get(segment) if isinstance(child, dict) else None
                return child

        items = sorted(
            node.items(),
            key=lambda item: (_rank(sort_value(*item)), item[0]),
        )
        for name, keep in (
            ("startAt", lambda rank, bound: rank >= bound),
            ("endAt", lambda rank, bound: rank <= bound),
            ("equalTo", lambda rank, bound: rank == bound),
        ):
            if name in params:
                bound = _rank(orjson.loads(params[name]))
                items = [i for i in items if keep(_rank(sort_value(*i)), bound)]
        if "limitToFirst" in params:
            items = items[: int(params["limitToFirst"])]
        if "limitToLast" in params:
            items = items[-int(params["limitToLast"]) :]
        # the real server returns the matches as an unordered object
        return {key: _export(child) for key, child in reversed(items)}

    @staticmethod
    def _json(status_code: int, body: Any) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=orjson.dumps(body),
            headers={"Content-Type": "application/json"},
        )


class FakeAuthBackend:
    """
    Replies to Auth actions with canned responses and records requests.

    `responses` maps an action name to `(status_code, body)`.
    """

    def __init__(self, responses: dict[str, tuple[int, Any]] | None = None):
        self.responses = dict(responses or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        action = request.url.path.rsplit("/", 1)[-1]
        status_code, body = self.responses.get(action, (200, {}))
        return httpx.Response(status_code, content=orjson.dumps(body))

    @property
    def last_body(self) -> Any:
        return orjson.loads(self.requests[-1].content)
