"""REST API for compiling policy documents into a graph."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from netpolgraph.graph.compiler import compile_graph
from netpolgraph.graph.filters import filter_by_direction
from netpolgraph.policy.loader import PolicyParseError, load_policies_from_string

router = APIRouter(tags=["graph"])


class GraphRequest(BaseModel):
    yaml_content: str
    deduplicate: bool | None = None
    direction: Literal["all", "ingress", "egress"] = "all"


@router.post("/graph")
async def build_graph(body: GraphRequest, request: Request):
    try:
        policies = load_policies_from_string(body.yaml_content)
    except PolicyParseError as e:
        return JSONResponse(status_code=422, content={"detail": str(e)})

    deduplicate = body.deduplicate
    if deduplicate is None:
        deduplicate = request.app.state.config.deduplicate

    graph = compile_graph(policies, deduplicate)
    return filter_by_direction(graph, body.direction).to_dict()
