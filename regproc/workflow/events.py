from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional

from regproc.observability.logging import log
from regproc.settings import settings
from regproc.utils.http import request_json
from regproc.utils.time import to_iso_utc


def _now_iso() -> str:
    return to_iso_utc(datetime.now(timezone.utc))


@dataclass
class WorkflowCompletedEvent:
    instanceId: str
    workflowType: Optional[str] = None
    resultCode: str = ""
    errorCode: Optional[str] = None
    timestamp: str = ""


@dataclass
class WorkflowPausedForAdditionalInfoEvent:
    instanceId: str
    workflowType: Optional[str] = None
    additionalInfoProcess: Optional[str] = None
    additionalInfoRequestId: str = ""
    timestamp: str = ""


class EventPublisher:
    """Publishes lifecycle events to the WebSub hub."""

    def __init__(self, hub_url: Optional[str] = None):
        self.hub_url = hub_url if hub_url is not None else settings.WEBSUB_HUB_URL

    def _topic_for(self, event) -> str:
        if isinstance(event, WorkflowPausedForAdditionalInfoEvent):
            return settings.WORKFLOW_PAUSED_FOR_ADDITIONAL_INFO_TOPIC
        return settings.WORKFLOW_COMPLETED_TOPIC

    def publish_event(self, event) -> None:
        if not event.timestamp:
            event.timestamp = _now_iso()
        topic = self._topic_for(event)
        request_json(
            "POST",
            self.hub_url,
            json_body=asdict(event),
            params={"hub.mode": "publish", "hub.topic": topic},
            api_name="WEBSUB_PUBLISH",
        )
        log(event="workflow_event_published", rid=event.instanceId, topic=topic, eventType=type(event).__name__)
