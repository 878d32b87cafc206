"""Family Tree - relationship engine backend.

FastAPI server exposing validation, relationship derivation and tree building
over member snapshots supplied in each request. Nothing is persisted.
"""

import logging
import os

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("familytree")

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from dotenv import load_dotenv

from family_tree import build_family_graph, build_family_tree, build_timeline
from family_utils import find_member, get_member_display_info, get_relatives, summarize
from family_validation import run_all_validations
from kinship import calculate_relationship, suggest_generation
from link_planner import plan_ancestor_link, plan_member_removal, plan_spouse_change, suggest_parents
from members import Gender, Member, member_summary

# Load environment variables
load_dotenv()

DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"]


def get_cors_origins() -> list[str]:
    """Origins from comma-separated CORS_ORIGINS, or the local dev defaults."""
    raw = os.getenv("CORS_ORIGINS", "")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or DEFAULT_CORS_ORIGINS


# Create FastAPI app
app = FastAPI(
    title="Family Tree",
    description="Family relationship engine: validation, derivation and tree building",
    version="1.0.0",
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class EngineRequest(BaseModel):
    """Base request carrying the caller's member snapshot."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    members: list[Member] = []


class ValidateRequest(EngineRequest):
    """A proposed parent/child edit."""
    member_id: str | None = None
    parent_id: str | None = None
    second_parent_id: str | None = None
    member_generation: int = 0
    is_half_sibling: bool = False
    birth_year: int | None = None
    member_type: str | None = None
    related_to_id: str | None = None
    generation_diff: int = Field(default=1, ge=1)


class ValidateResponse(BaseModel):
    """Blocking errors and advisory warnings."""
    errors: list[str]
    warnings: list[str]


class TreeRequest(EngineRequest):
    merge_spouses: bool = True


class TreeResponse(BaseModel):
    """Response containing a family tree structure."""
    tree: dict | None
    member_count: int


class ClassifyRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    member_type: str
    gender: Gender | None = None
    generation_diff: int = 1
    is_half_sibling: bool = False


class SuggestRequest(EngineRequest):
    member_type: str | None = None
    related_to_id: str | None = None
    is_half_sibling: bool = False


class SpouseLinkRequest(EngineRequest):
    member_id: str
    new_spouse_id: str | None = None


class AncestorLinkRequest(EngineRequest):
    new_member_id: str
    related_to_id: str


class RemovalRequest(EngineRequest):
    member_id: str


# Endpoints

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    logger.debug("Health check requested")
    return {"status": "healthy"}


@app.post("/validate", response_model=ValidateResponse)
async def validate_edit(request: ValidateRequest):
    """Validate a proposed edit against the supplied snapshot."""
    logger.info(f"Validating edit for member_id={request.member_id} over {len(request.members)} members")
    result = run_all_validations(
        request.member_id,
        request.parent_id,
        request.second_parent_id,
        request.member_generation,
        request.members,
        is_half_sibling=request.is_half_sibling,
        birth_year=request.birth_year,
        member_type=request.member_type,
        related_to_id=request.related_to_id,
        generation_diff=request.generation_diff,
    )
    if result["errors"]:
        logger.info(f"Edit rejected with {len(result['errors'])} error(s)")
    return result


@app.post("/tree", response_model=TreeResponse)
async def get_family_tree(request: TreeRequest):
    """Build the hierarchical tree for rendering."""
    logger.info(f"Building tree for {len(request.members)} members (merge_spouses={request.merge_spouses})")
    tree = build_family_tree(request.members, merge_spouses=request.merge_spouses)
    return {"tree": tree, "member_count": len(request.members)}


@app.post("/graph")
async def get_family_graph(request: EngineRequest):
    """Flat node/edge export for layout engines."""
    logger.info(f"Building graph for {len(request.members)} members")
    return build_family_graph(request.members)


@app.post("/timeline")
async def get_timeline(request: EngineRequest):
    """Members grouped by birth year."""
    logger.info(f"Building timeline for {len(request.members)} members")
    return build_timeline(request.members)


@app.post("/relationships/{member_id}")
async def get_member_relationships(member_id: str, request: EngineRequest):
    """Every derived relationship category for one member."""
    logger.info(f"Deriving relationships for member_id={member_id}")

    member = find_member(member_id, request.members)
    if not member:
        logger.warning(f"Member {member_id} not found in snapshot")
        raise HTTPException(status_code=404, detail=f"Member with ID {member_id} not found")

    relatives = get_relatives(member_id, request.members)
    return {
        "member": member_summary(member),
        "displayInfo": get_member_display_info(member, request.members),
        "relatives": {category: summarize(people) for category, people in relatives.items()},
    }


@app.post("/classify")
async def classify_relationship(request: ClassifyRequest):
    """Map a member type, gender and generation distance to a kinship label."""
    try:
        relationship = calculate_relationship(
            request.member_type,
            request.gender,
            request.generation_diff,
            request.is_half_sibling,
        )
    except ValueError as e:
        logger.warning(f"Invalid classify request: {str(e)}")
        raise HTTPException(status_code=422, detail=str(e))
    return {"relationship": relationship}


@app.post("/suggest")
async def suggest_for_new_member(request: SuggestRequest):
    """Suggested generation and parent slots for a member being added."""
    related = find_member(request.related_to_id, request.members)
    parents = suggest_parents(
        request.member_type, request.related_to_id, request.members, request.is_half_sibling
    )
    return {
        "generation": suggest_generation(request.member_type, related, len(request.members)),
        **parents,
    }


@app.post("/link-plan/spouse")
async def plan_spouse_link(request: SpouseLinkRequest):
    """Writes needed to keep spouse links bidirectional."""
    patches = plan_spouse_change(request.member_id, request.new_spouse_id, request.members)
    logger.info(f"Planned {len(patches)} spouse patch(es) for member_id={request.member_id}")
    return {"patches": patches}


@app.post("/link-plan/ancestor")
async def plan_ancestor(request: AncestorLinkRequest):
    """Writes needed to attach a new ancestor to the related member."""
    plan = plan_ancestor_link(request.new_member_id, request.related_to_id, request.members)
    logger.info(f"Planned {len(plan['patches'])} ancestor patch(es) for related_to_id={request.related_to_id}")
    return plan


@app.post("/link-plan/removal")
async def plan_removal(request: RemovalRequest):
    """Writes needed to detach a member before removing it."""
    patches = plan_member_removal(request.member_id, request.members)
    logger.info(f"Planned {len(patches)} removal patch(es) for member_id={request.member_id}")
    return {"patches": patches}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
