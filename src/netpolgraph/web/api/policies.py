"""REST API for parsing policy documents."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from netpolgraph.policy.loader import PolicyParseError, load_policies_from_string

router = APIRouter(tags=["policies"])


class PolicyDocument(BaseModel):
    yaml_content: str


@router.post("/policies/parse")
async def parse_policies(body: PolicyDocument):
    try:
        policies = load_policies_from_string(body.yaml_content)
    except PolicyParseError as e:
        return JSONResponse(status_code=422, content={"detail": str(e)})
    return [p.to_dict() for p in policies]
