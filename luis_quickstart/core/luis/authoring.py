"""
LUIS authoring client.

Exposes the authoring operations the quickstart needs, grouped the way the
service groups them:

    client.apps       add, publish
    client.model      add_intent, add_prebuilt, add_entity, get_entity
    client.features   add_phrase_list, add_entity_feature
    client.examples   add
    client.train      train_version, get_status

Service API:
    Base path: luis/authoring/v3.0-preview/
    Header:    Ocp-Apim-Subscription-Key: <authoring key>
"""

import logging
from typing import Any, Optional

import httpx

from .base import LuisHttpClient
from .types import (
    AppDefinition,
    EntityFeature,
    EntityNode,
    LabeledExample,
    ModelTrainingInfo,
    PhraseList,
)

AUTHORING_PATH = "luis/authoring/v3.0-preview/"

logger = logging.getLogger("authoring")


def _version_path(app_id: str, version_id: str) -> str:
    return f"apps/{app_id}/versions/{version_id}"


def _resource_id(payload: Any) -> str:
    """Creation calls answer with the bare id of the new resource."""
    if not isinstance(payload, (str, int)) or isinstance(payload, bool) or payload == "":
        raise TypeError(f"expected a resource id, got {type(payload).__name__}")
    return str(payload)


def _training_statuses(payload: Any) -> list[ModelTrainingInfo]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise TypeError(f"expected a list of model statuses, got {type(payload).__name__}")
    return [ModelTrainingInfo.from_dict(item) for item in payload]


class Apps:
    def __init__(self, http: LuisHttpClient):
        self._http = http

    async def add(self, app: AppDefinition) -> str:
        """Create an application and return its id."""
        logger.info("Creating app %r (version %s, %s)", app.name, app.initial_version_id, app.culture)
        return await self._http.request("POST", "apps/", json=app.dict(), parse=_resource_id)

    async def publish(self, app_id: str, version_id: str, is_staging: bool = False) -> dict[str, Any]:
        """Publish a version to the staging or production slot."""
        logger.info("Publishing app %s version %s (staging: %s)", app_id, version_id, is_staging)
        return await self._http.request(
            "POST", f"apps/{app_id}/publish",
            json={"versionId": version_id, "isStaging": is_staging},
        )


class Model:
    def __init__(self, http: LuisHttpClient):
        self._http = http

    async def add_intent(self, app_id: str, version_id: str, name: str) -> str:
        logger.info("Adding intent %r", name)
        return await self._http.request(
            "POST", f"{_version_path(app_id, version_id)}/intents", json={"name": name},
            parse=_resource_id,
        )

    async def add_prebuilt(self, app_id: str, version_id: str, names: list[str]) -> list[dict[str, Any]]:
        logger.info("Adding prebuilt entities %s", names)
        return await self._http.request(
            "POST", f"{_version_path(app_id, version_id)}/prebuilts", json=list(names),
        )

    async def add_entity(self, app_id: str, version_id: str, entity: EntityNode) -> str:
        """Create a machine-learned entity (with its children) and return the root id."""
        logger.info("Adding entity %r with %d children", entity.name, len(entity.children))
        return await self._http.request(
            "POST", f"{_version_path(app_id, version_id)}/entities", json=entity.dict(),
            parse=_resource_id,
        )

    async def get_entity(self, app_id: str, version_id: str, entity_id: str) -> EntityNode:
        """Fetch an entity definition, including the ids of every descendant."""
        logger.debug("Fetching entity %s", entity_id)
        return await self._http.request(
            "GET", f"{_version_path(app_id, version_id)}/entities/{entity_id}",
            parse=EntityNode.from_dict,
        )


class Features:
    def __init__(self, http: LuisHttpClient):
        self._http = http

    async def add_phrase_list(self, app_id: str, version_id: str, phrase_list: PhraseList) -> int:
        logger.info("Adding phrase list %r (%d phrases)", phrase_list.name, len(phrase_list.phrases))
        return await self._http.request(
            "POST", f"{_version_path(app_id, version_id)}/phraselists", json=phrase_list.dict(),
            parse=int,
        )

    async def add_entity_feature(
        self, app_id: str, version_id: str, entity_id: str, feature: EntityFeature
    ) -> Optional[dict[str, Any]]:
        logger.info(
            "Attaching feature %s to entity %s",
            feature.model_name or feature.feature_name, entity_id,
        )
        return await self._http.request(
            "POST", f"{_version_path(app_id, version_id)}/entities/{entity_id}/features",
            json=feature.dict(),
        )


class Examples:
    def __init__(self, http: LuisHttpClient):
        self._http = http

    async def add(
        self,
        app_id: str,
        version_id: str,
        example: LabeledExample,
        enable_nested_children: bool = False,
    ) -> dict[str, Any]:
        """
        Add one labeled utterance.

        With enable_nested_children, labels are matched to entities by their
        position in the tree, so two children may share a name.
        """
        logger.info("Adding labeled example %r", example.text)
        return await self._http.request(
            "POST", f"{_version_path(app_id, version_id)}/example",
            json=example.dict(),
            params={"enableNestedChildren": "true" if enable_nested_children else "false"},
        )


class Train:
    def __init__(self, http: LuisHttpClient):
        self._http = http

    async def train_version(self, app_id: str, version_id: str) -> dict[str, Any]:
        logger.info("Queueing training for app %s version %s", app_id, version_id)
        return await self._http.request("POST", f"{_version_path(app_id, version_id)}/train")

    async def get_status(self, app_id: str, version_id: str) -> list[ModelTrainingInfo]:
        return await self._http.request(
            "GET", f"{_version_path(app_id, version_id)}/train", parse=_training_statuses,
        )


class AuthoringClient:
    """
    Client for the LUIS authoring API.

    Usage:
        async with AuthoringClient(endpoint, key) as client:
            app_id = await client.apps.add(AppDefinition("My app", "0.1"))
    """

    def __init__(
        self,
        endpoint: str,
        key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.http = LuisHttpClient(
            endpoint, AUTHORING_PATH, key,
            timeout=timeout, transport=transport, logger_name="authoring",
        )
        self.apps = Apps(self.http)
        self.model = Model(self.http)
        self.features = Features(self.http)
        self.examples = Examples(self.http)
        self.train = Train(self.http)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
