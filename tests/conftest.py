"""
Shared fixtures: an in-memory LUIS service served through httpx.MockTransport.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import pytest

from luis_quickstart.core.config import Config

APP_ID = "11111111-2222-3333-4444-555555555555"

ENTITY_TREE = {
    "id": "entity-root",
    "name": "Pizza order",
    "children": [
        {"id": "pizza", "name": "Pizza", "children": [
            {"id": "pizza-quantity", "name": "Quantity", "children": []},
            {"id": "pizza-type", "name": "Type", "children": []},
            {"id": "pizza-size", "name": "Size", "children": []},
        ]},
        {"id": "toppings", "name": "Toppings", "children": [
            {"id": "toppings-type", "name": "Type", "children": []},
            {"id": "toppings-quantity", "name": "Quantity", "children": []},
        ]},
    ],
}

PREDICTION = {
    "topIntent": "OrderPizzaIntent",
    "intents": {"OrderPizzaIntent": {"score": 0.97}},
    "entities": {"Pizza order": [{"Pizza": [{"Quantity": [2], "Size": ["small"], "Type": ["pepperoni"]}]}]},
}

VERSION = r"apps/(?P<app>[^/]+)/versions/(?P<version>[^/]+)"

# (operation, method, path regex relative to the API base path)
ROUTES = [
    ("apps.add", "POST", r"apps/?"),
    ("model.add_intent", "POST", VERSION + r"/intents"),
    ("model.add_prebuilt", "POST", VERSION + r"/prebuilts"),
    ("model.add_entity", "POST", VERSION + r"/entities"),
    ("model.get_entity", "GET", VERSION + r"/entities/(?P<entity>[^/]+)"),
    ("features.add_entity_feature", "POST", VERSION + r"/entities/(?P<entity>[^/]+)/features"),
    ("features.add_phrase_list", "POST", VERSION + r"/phraselists"),
    ("examples.add", "POST", VERSION + r"/example"),
    ("train.train_version", "POST", VERSION + r"/train"),
    ("train.get_status", "GET", VERSION + r"/train"),
    ("apps.publish", "POST", r"apps/(?P<app>[^/]+)/publish"),
    ("prediction.get_slot_prediction", "POST", r"apps/(?P<app>[^/]+)/slots/(?P<slot>[^/]+)/predict"),
]

BASE_PATHS = ("/luis/authoring/v3.0-preview/", "/luis/prediction/v3.0/")


def status_list(*statuses: str) -> list[dict[str, Any]]:
    return [
        {"modelId": f"model-{i}", "details": {"statusId": 0, "status": s, "exampleCount": 1}}
        for i, s in enumerate(statuses)
    ]


@dataclass
class Call:
    op: str
    method: str
    host: str
    path: str
    params: dict[str, str]
    body: Any
    key: Optional[str]


class FakeLuis:
    """
    Records every request and answers like the LUIS service would.

    `training` is the sequence of get_status bodies; the last one repeats.
    `errors` maps an operation name to the status code it should fail with.
    `raw` maps an operation name to a canned httpx.Response returned as is.
    """

    def __init__(self, training: Optional[list] = None, entity: Optional[dict] = None):
        self.calls: list[Call] = []
        self.training = list(training or [status_list("Success", "Success")])
        self.entity = entity or ENTITY_TREE
        self.errors: dict[str, int] = {}
        self.raw: dict[str, httpx.Response] = {}

    @property
    def ops(self) -> list[str]:
        return [c.op for c in self.calls]

    def calls_for(self, op: str) -> list[Call]:
        return [c for c in self.calls if c.op == op]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def _route(self, request: httpx.Request) -> str:
        path = request.url.path
        for base in BASE_PATHS:
            if path.startswith(base):
                rel = path[len(base):]
                for op, method, pattern in ROUTES:
                    if request.method == method and re.fullmatch(pattern, rel):
                        return op
        return "unknown"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        op = self._route(request)
        body = json.loads(request.content) if request.content else None
        self.calls.append(Call(
            op=op,
            method=request.method,
            host=request.url.host,
            path=request.url.path,
            params=dict(request.url.params),
            body=body,
            key=request.headers.get("Ocp-Apim-Subscription-Key"),
        ))

        if op in self.errors:
            code = self.errors[op]
            return httpx.Response(code, json={"error": {"code": str(code), "message": f"{op} rejected"}})
        if op in self.raw:
            return self.raw[op]

        if op == "apps.add":
            return httpx.Response(201, json=APP_ID)
        if op == "model.add_intent":
            return httpx.Response(201, json="intent-1")
        if op == "model.add_prebuilt":
            return httpx.Response(201, json=[{"id": "prebuilt-number", "name": "number"}])
        if op == "model.add_entity":
            return httpx.Response(201, json="entity-root")
        if op == "features.add_phrase_list":
            return httpx.Response(201, json=42)
        if op == "model.get_entity":
            return httpx.Response(200, json=self.entity)
        if op == "features.add_entity_feature":
            return httpx.Response(200, json={"code": "Success", "message": "Operation Successful"})
        if op == "examples.add":
            return httpx.Response(201, json={"UtteranceText": body["text"], "ExampleId": 1})
        if op == "train.train_version":
            return httpx.Response(202, json={"statusId": 9, "status": "Queued"})
        if op == "train.get_status":
            statuses = self.training.pop(0) if len(self.training) > 1 else self.training[0]
            return httpx.Response(200, json=statuses)
        if op == "apps.publish":
            return httpx.Response(201, json={"versionId": body["versionId"], "isStaging": body["isStaging"]})
        if op == "prediction.get_slot_prediction":
            return httpx.Response(200, json={"query": body["query"], "prediction": PREDICTION})
        return httpx.Response(404, json={"error": {"code": "NotFound"}})


@pytest.fixture
def env():
    return {
        "AUTHORING_KEY": "authoring-key-1234",
        "AUTHORING_RESOURCE_NAME": "contoso-authoring",
        "PREDICTION_RESOURCE_NAME": "contoso-prediction",
    }


@pytest.fixture
def config(env):
    cfg = Config.from_env(env)
    cfg.poll_interval = 0.001
    cfg.training_timeout = 2.0
    return cfg


@pytest.fixture
def fake_luis():
    return FakeLuis()


@pytest.fixture
def make_luis():
    """Factory for a FakeLuis with custom training responses or entity tree."""
    return FakeLuis


@pytest.fixture
def statuses():
    """Build a get_status body: statuses("Success", "InProgress")."""
    return status_list
