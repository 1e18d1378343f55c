from dataclasses import dataclass, asdict, field
from typing import Any, Optional
import time
import uuid

# Base Event
@dataclass(slots=True)
class Event:
    topic: str
    ts_ms: int = field(default_factory=lambda: int(time.time() * 1000))
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def dict(self) -> dict[str, Any]:
        return asdict(self)

# Step lifecycle

@dataclass(slots=True)
class StepStarted(Event):
    topic: str = "quickstart.step.started"
    step: str = ""
    index: int = 0        # 1-based position in the pipeline
    total: int = 0

@dataclass(slots=True)
class StepCompleted(Event):
    topic: str = "quickstart.step.completed"
    step: str = ""
    index: int = 0
    total: int = 0
    elapsed_s: float = 0.0
    # identifiers produced by the step, e.g. {"app_id": "..."}
    result: dict[str, Any] = field(default_factory=dict)

# Payloads worth showing to the user

@dataclass(slots=True)
class LabeledExampleBuilt(Event):
    topic: str = "quickstart.example.built"
    example: dict[str, Any] = field(default_factory=dict)

@dataclass(slots=True)
class TrainingPolled(Event):
    topic: str = "quickstart.training.polled"
    attempt: int = 0
    statuses: dict[str, int] = field(default_factory=dict)   # status -> model count

@dataclass(slots=True)
class PredictionReceived(Event):
    topic: str = "quickstart.prediction"
    query: str = ""
    slot: str = "Production"
    prediction: Optional[dict[str, Any]] = None
