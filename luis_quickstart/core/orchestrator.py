"""
The quickstart pipeline.

Twelve steps run strictly in order, each one threading the identifiers it
obtains into QuickstartState for the next:

    create_app -> add_intent -> add_prebuilt_entity -> add_ml_entity
    -> add_phrase_list_feature -> resolve_sub_entity_ids -> attach_features
    -> add_labeled_example -> train -> poll_training_status -> publish
    -> predict

A failure in any step aborts the run. Nothing created remotely is rolled
back.
"""

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .bus import Bus
from .config import Config
from .contracts import LabeledExampleBuilt, PredictionReceived, StepCompleted, StepStarted, TrainingPolled
from .errors import QuickstartError
from .luis.authoring import AuthoringClient
from .luis.base import remote_operation
from .luis.entities import find_grandchild_id
from .luis.runtime import RuntimeClient
from .luis.types import AppDefinition, EntityFeature, ModelTrainingInfo
from .training import summarize, wait_for_training
from luis_quickstart.samples import pizza

logger = logging.getLogger("quickstart")


class Step(str, Enum):
    CREATE_APP = "create_app"
    ADD_INTENT = "add_intent"
    ADD_PREBUILT_ENTITY = "add_prebuilt_entity"
    ADD_ML_ENTITY = "add_ml_entity"
    ADD_PHRASE_LIST_FEATURE = "add_phrase_list_feature"
    RESOLVE_SUB_ENTITY_IDS = "resolve_sub_entity_ids"
    ATTACH_FEATURES = "attach_features"
    ADD_LABELED_EXAMPLE = "add_labeled_example"
    TRAIN = "train"
    POLL_TRAINING_STATUS = "poll_training_status"
    PUBLISH = "publish"
    PREDICT = "predict"


STEPS: tuple[Step, ...] = tuple(Step)


@dataclass(slots=True)
class QuickstartState:
    """Identifiers collected so far. Only the remote service holds real state."""

    app_id: Optional[str] = None
    intent_id: Optional[str] = None
    ml_entity_id: Optional[str] = None
    phrase_list_id: Optional[int] = None
    pizza_quantity_id: Optional[str] = None
    toppings_quantity_id: Optional[str] = None
    training: Optional[list[ModelTrainingInfo]] = None
    published: Optional[dict[str, Any]] = None
    prediction: Optional[dict[str, Any]] = None
    completed: tuple[str, ...] = ()


class Quickstart:
    """
    Runs the pizza quickstart against one authoring and one runtime client.

    Progress is published on the bus (see contracts.py); nothing is printed
    here.
    """

    def __init__(self, authoring: AuthoringClient, runtime: RuntimeClient, bus: Bus, config: Config):
        self.authoring = authoring
        self.runtime = runtime
        self.bus = bus
        self.config = config
        self.state = QuickstartState()
        self.run_id = uuid.uuid4().hex

    async def run(self) -> QuickstartState:
        """Run every step in order and return the final state."""
        logger.info("Starting quickstart for %r (version %s)", self.config.app_name, self.config.version_id)
        for index, step in enumerate(STEPS, start=1):
            await self.run_step(step, index)
        logger.info("Quickstart finished: app %s", self.state.app_id)
        return self.state

    async def run_step(self, step: Step, index: int = 0) -> dict[str, Any]:
        handler = getattr(self, f"_{step.value}")
        total = len(STEPS)
        await self._emit(StepStarted(step=step.value, index=index, total=total))
        logger.info("Step %d/%d: %s", index, total, step.value)
        started = time.monotonic()
        try:
            with remote_operation(step.value, self._context()):
                result = await handler() or {}
        except QuickstartError as e:
            if e.step is None:
                e.step = step.value
            for key, value in self._context().items():
                e.context.setdefault(key, value)
            raise

        self.state.completed += (step.value,)
        await self._emit(StepCompleted(
            step=step.value, index=index, total=total,
            elapsed_s=round(time.monotonic() - started, 3), result=result,
        ))
        return result

    def _context(self) -> dict[str, Any]:
        ctx: dict[str, Any] = {}
        if self.state.app_id:
            ctx["app_id"] = self.state.app_id
        ctx["version"] = self.config.version_id
        return ctx

    async def _emit(self, event) -> None:
        event.run_id = self.run_id
        await self.bus.publish(event.topic, event.dict())

    # Steps

    async def _create_app(self):
        app = AppDefinition(
            name=self.config.app_name,
            initial_version_id=self.config.version_id,
            culture=self.config.culture,
        )
        self.state.app_id = await self.authoring.apps.add(app)
        return {"app_id": self.state.app_id}

    async def _add_intent(self):
        self.state.intent_id = await self.authoring.model.add_intent(
            self.state.app_id, self.config.version_id, pizza.INTENT_NAME
        )
        return {"intent": pizza.INTENT_NAME, "intent_id": self.state.intent_id}

    async def _add_prebuilt_entity(self):
        await self.authoring.model.add_prebuilt(self.state.app_id, self.config.version_id, pizza.PREBUILT_ENTITIES)
        return {"prebuilt": list(pizza.PREBUILT_ENTITIES)}

    async def _add_ml_entity(self):
        self.state.ml_entity_id = await self.authoring.model.add_entity(
            self.state.app_id, self.config.version_id, pizza.build_entity_definition()
        )
        return {"ml_entity_id": self.state.ml_entity_id}

    async def _add_phrase_list_feature(self):
        self.state.phrase_list_id = await self.authoring.features.add_phrase_list(
            self.state.app_id, self.config.version_id, pizza.build_phrase_list()
        )
        return {"phrase_list_id": self.state.phrase_list_id}

    async def _resolve_sub_entity_ids(self):
        entity = await self.authoring.model.get_entity(
            self.state.app_id, self.config.version_id, self.state.ml_entity_id
        )
        self.state.toppings_quantity_id = find_grandchild_id(entity, *pizza.TOPPINGS_QUANTITY)
        self.state.pizza_quantity_id = find_grandchild_id(entity, *pizza.PIZZA_QUANTITY)
        return {
            "pizza_quantity_id": self.state.pizza_quantity_id,
            "toppings_quantity_id": self.state.toppings_quantity_id,
        }

    async def _attach_features(self):
        features = self.authoring.features
        app_id, version_id = self.state.app_id, self.config.version_id
        attachments = [
            (self.state.pizza_quantity_id, EntityFeature(model_name="number", is_required=True)),
            (self.state.toppings_quantity_id, EntityFeature(model_name="number")),
            (self.state.toppings_quantity_id, EntityFeature(feature_name=pizza.PHRASE_LIST_NAME)),
        ]
        # independent of each other; all must land before training
        tasks = [
            asyncio.create_task(features.add_entity_feature(app_id, version_id, entity_id, feature))
            for entity_id, feature in attachments
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            # the first failure (or our own cancellation) ends the step with no request left in flight
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return {"features": len(tasks)}

    async def _add_labeled_example(self):
        example = pizza.build_labeled_example()
        payload = example.dict()
        logger.debug("Labeled example: %s", json.dumps(payload))
        await self._emit(LabeledExampleBuilt(example=payload))
        # nested children lets Pizza/Quantity and Toppings/Quantity share a name
        await self.authoring.examples.add(
            self.state.app_id, self.config.version_id, example, enable_nested_children=True
        )
        return {"text": example.text}

    async def _train(self):
        await self.authoring.train.train_version(self.state.app_id, self.config.version_id)
        return {}

    async def _poll_training_status(self):
        async def _on_poll(attempt: int, statuses: list[ModelTrainingInfo]) -> None:
            await self._emit(TrainingPolled(attempt=attempt, statuses=summarize(statuses)))

        self.state.training = await wait_for_training(
            self.authoring.train,
            self.state.app_id,
            self.config.version_id,
            interval=self.config.poll_interval,
            timeout=self.config.training_timeout,
            on_poll=_on_poll,
        )
        return {"models": len(self.state.training)}

    async def _publish(self):
        self.state.published = await self.authoring.apps.publish(
            self.state.app_id, self.config.version_id, is_staging=False
        )
        return {"slot": pizza.PREDICTION_SLOT}

    async def _predict(self):
        response = await self.runtime.prediction.get_slot_prediction(
            self.state.app_id, pizza.PREDICTION_SLOT, pizza.PREDICTION_QUERY
        )
        self.state.prediction = (response or {}).get("prediction")
        await self._emit(PredictionReceived(
            query=pizza.PREDICTION_QUERY, slot=pizza.PREDICTION_SLOT, prediction=self.state.prediction,
        ))
        return {"top_intent": (self.state.prediction or {}).get("topIntent")}
