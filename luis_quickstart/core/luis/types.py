"""Typed request and response records exchanged with the LUIS service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(slots=True)
class AppDefinition:
    name: str
    initial_version_id: str
    culture: str = "en-us"

    def dict(self) -> dict[str, Any]:
        return {"name": self.name, "initialVersionId": self.initial_version_id, "culture": self.culture}


@dataclass(slots=True)
class EntityNode:
    """
    One node of a machine-learned entity tree.

    `id` stays None until the service has persisted the node and the
    definition has been fetched back.
    """

    name: str
    id: Optional[str] = None
    children: list["EntityNode"] = field(default_factory=list)

    def find_child(self, name: str) -> Optional["EntityNode"]:
        """First immediate child whose name matches exactly, else None."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.id is not None:
            out["id"] = self.id
        if self.children:
            out["children"] = [c.dict() for c in self.children]
        return out

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "EntityNode":
        raw_id = payload.get("id")
        return cls(
            name=payload["name"],
            id=str(raw_id) if raw_id is not None else None,
            children=[cls.from_dict(c) for c in payload.get("children") or []],
        )


@dataclass(slots=True)
class PhraseList:
    name: str
    phrases: list[str] = field(default_factory=list)
    is_exchangeable: bool = True
    enabled_for_all_models: bool = False

    def dict(self) -> dict[str, Any]:
        # the service takes phrases as a single comma-separated string
        return {
            "enabledForAllModels": self.enabled_for_all_models,
            "isExchangeable": self.is_exchangeable,
            "name": self.name,
            "phrases": ",".join(self.phrases),
        }


@dataclass(slots=True)
class EntityFeature:
    """A feature bound to an entity, either a model (by name) or a phrase list feature."""

    model_name: Optional[str] = None
    feature_name: Optional[str] = None
    is_required: Optional[bool] = None

    def __post_init__(self) -> None:
        if bool(self.model_name) == bool(self.feature_name):
            raise ValueError("EntityFeature requires exactly one of model_name or feature_name")

    def dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.model_name:
            out["modelName"] = self.model_name
        if self.feature_name:
            out["featureName"] = self.feature_name
        if self.is_required is not None:
            out["isRequired"] = self.is_required
        return out


@dataclass(slots=True)
class EntityLabel:
    """Character span of an entity in an utterance. Both indexes are inclusive."""

    entity_name: str
    start_char_index: int
    end_char_index: int
    children: list["EntityLabel"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.start_char_index < 0 or self.end_char_index < self.start_char_index:
            raise ValueError(
                f"invalid span for {self.entity_name!r}: {self.start_char_index}..{self.end_char_index}"
            )

    def dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "startCharIndex": self.start_char_index,
            "endCharIndex": self.end_char_index,
            "entityName": self.entity_name,
        }
        if self.children:
            out["children"] = [c.dict() for c in self.children]
        return out


@dataclass(slots=True)
class LabeledExample:
    text: str
    intent_name: str
    entity_labels: list[EntityLabel] = field(default_factory=list)

    def dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "intentName": self.intent_name,
            "entityLabels": [label.dict() for label in self.entity_labels],
        }


@dataclass(slots=True)
class ModelTrainingInfo:
    model_id: str
    status: str
    failure_reason: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ModelTrainingInfo":
        details = payload.get("details") or {}
        return cls(
            model_id=str(payload.get("modelId", "")),
            status=details.get("status", ""),
            failure_reason=details.get("failureReason"),
        )
