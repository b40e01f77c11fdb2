"""
Flow registry: an explicit dispatch table from flow name to handler.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel

from quiz_assistant.core.exceptions import FlowNotFoundError, FlowRegistrationError
from quiz_assistant.core.observability import get_observability_service
from quiz_assistant.domain.schemas import FlowInfo

logger = logging.getLogger(__name__)

FlowHandler = Callable[[Any], Awaitable[BaseModel]]


@dataclass(frozen=True)
class Flow:
    """A named, schema-typed wrapper around one prompt-and-completion call."""

    name: str
    description: str
    input_schema: type[BaseModel]
    output_schema: type[BaseModel]
    handler: FlowHandler

    def info(self) -> FlowInfo:
        return FlowInfo(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema.model_json_schema(by_alias=True),
            output_schema=self.output_schema.model_json_schema(by_alias=True),
        )


class FlowRegistry:
    """Holds the flows available to the API."""

    def __init__(self):
        self._flows: dict[str, Flow] = {}
        self.observability = get_observability_service()

    def register(self, flow: Flow) -> None:
        if flow.name in self._flows:
            raise FlowRegistrationError(f"Flow '{flow.name}' is already registered")
        self._flows[flow.name] = flow
        logger.debug(f"Registered flow {flow.name}")

    def get(self, name: str) -> Flow:
        try:
            return self._flows[name]
        except KeyError:
            raise FlowNotFoundError(name) from None

    def names(self) -> list[str]:
        return list(self._flows)

    def describe(self) -> list[FlowInfo]:
        return [flow.info() for flow in self._flows.values()]

    def __contains__(self, name: str) -> bool:
        return name in self._flows

    def __len__(self) -> int:
        return len(self._flows)

    async def run(self, name: str, payload: Union[BaseModel, dict[str, Any]]) -> BaseModel:
        """
        Validate ``payload`` against the flow's input schema and run the flow.

        Raises:
            FlowNotFoundError: if no flow is registered under ``name``
            pydantic.ValidationError: if the payload does not match the input schema
        """
        flow = self.get(name)

        if isinstance(payload, flow.input_schema):
            flow_input = payload
        elif isinstance(payload, BaseModel):
            flow_input = flow.input_schema.model_validate(payload.model_dump(by_alias=True))
        else:
            flow_input = flow.input_schema.model_validate(payload)

        start_time = time.time()
        outcome = "error"
        try:
            result = await flow.handler(flow_input)
            outcome = "ok"
            return result
        finally:
            self.observability.record_flow(name, outcome, time.time() - start_time)
