"""
Flow API endpoints: listing and generic dispatch through the flow registry.
"""

import logging
from typing import Any, Union

import httpx
from fastapi import APIRouter, Body, Depends, HTTPException, Request
from pydantic import BaseModel, ValidationError

from quiz_assistant.core.exceptions import (
    CompletionBackendError,
    FlowNotFoundError,
    FlowOutputError,
)
from quiz_assistant.domain.schemas import FlowInfo
from quiz_assistant.flows import FlowRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def get_flow_registry(request: Request) -> FlowRegistry:
    """Dependency returning the registry built during application startup."""
    registry = getattr(request.app.state, "flow_registry", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Flows are not initialized")
    return registry


async def run_flow(
    registry: FlowRegistry, name: str, payload: Union[BaseModel, dict[str, Any]]
) -> BaseModel:
    """Run a flow and translate failures into HTTP errors."""
    try:
        return await registry.run(name, payload)

    except FlowNotFoundError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        logger.warning(f"Invalid input for flow {name}: {e.error_count()} errors")
        raise HTTPException(
            status_code=422, detail=e.errors(include_url=False, include_context=False)
        )
    except FlowOutputError as e:
        logger.error(f"Flow {name} produced no usable output: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except (httpx.HTTPError, CompletionBackendError) as e:
        logger.error(f"Completion backend error in flow {name}: {e}")
        raise HTTPException(status_code=502, detail="Completion backend unavailable")
    except Exception as e:
        logger.error(f"Unexpected error in flow {name}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/", response_model=list[FlowInfo])
async def list_flows(registry: FlowRegistry = Depends(get_flow_registry)) -> list[FlowInfo]:
    """List registered flows with their input and output JSON schemas."""
    return registry.describe()


@router.post("/{flow_name}")
async def dispatch_flow(
    flow_name: str,
    payload: dict[str, Any] = Body(...),
    registry: FlowRegistry = Depends(get_flow_registry),
) -> dict[str, Any]:
    """
    Run any registered flow by name.

    The body is validated against the flow's input schema; the response uses the
    flow's output schema with camelCase field names.
    """
    logger.info(f"Dispatching flow {flow_name}")
    result = await run_flow(registry, flow_name, payload)
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)
