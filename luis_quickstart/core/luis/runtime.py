"""
LUIS runtime (prediction) client.

Service API:
    POST luis/prediction/v3.0/apps/{appId}/slots/{slotName}/predict
    Header: Ocp-Apim-Subscription-Key: <key>
    Body:   {"query": "utterance text"}

    Response:
        {"query": "...", "prediction": {"topIntent": "...", "intents": {...}, "entities": {...}}}
"""

import logging
from typing import Any, Optional

import httpx

from .base import LuisHttpClient

PREDICTION_PATH = "luis/prediction/v3.0/"

logger = logging.getLogger("runtime")


def _prediction_response(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict) or not isinstance(payload.get("prediction"), dict):
        raise TypeError(f"expected a prediction response object, got {type(payload).__name__}")
    return payload


class Prediction:
    def __init__(self, http: LuisHttpClient):
        self._http = http

    async def get_slot_prediction(
        self,
        app_id: str,
        slot_name: str,
        query: str,
        verbose: Optional[bool] = None,
        show_all_intents: Optional[bool] = None,
        log: Optional[bool] = None,
    ) -> dict[str, Any]:
        """
        Predict intent and entities for `query` against a published slot.

        Returns:
            The full response: {"query": ..., "prediction": {...}}

        Raises:
            ValueError: If query is empty
        """
        if not query or not query.strip():
            raise ValueError("Query cannot be empty")

        params: dict[str, Any] = {}
        for name, value in (("verbose", verbose), ("show-all-intents", show_all_intents), ("log", log)):
            if value is not None:
                params[name] = "true" if value else "false"

        logger.info("Predicting on app %s slot %s: %r", app_id, slot_name, query)
        return await self._http.request(
            "POST", f"apps/{app_id}/slots/{slot_name}/predict",
            json={"query": query.strip()},
            params=params or None,
            parse=_prediction_response,
        )


class RuntimeClient:
    """Client for the LUIS prediction API."""

    def __init__(
        self,
        endpoint: str,
        key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.http = LuisHttpClient(
            endpoint, PREDICTION_PATH, key,
            timeout=timeout, transport=transport, logger_name="runtime",
        )
        self.prediction = Prediction(self.http)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
