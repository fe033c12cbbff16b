"""
Onboarding endpoints - catalog, recommendations and wizard transitions.

The wizard state lives on the client; each call posts the current state and
gets the next one back.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ecolink.models.onboarding import WizardState, WizardStep, WizardTransitionRequest, WizardTransitionResponse
from ecolink.models.user import UserIdentity
from ecolink.routes.dependencies import get_current_identity
from ecolink.services.onboarding_catalog import ACTIVITIES, INTERESTS, split_activities
from ecolink.services.onboarding_workflow import OnboardingWorkflow, discard_selections
from ecolink.services.preferences_service import get_preferences_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["Onboarding"])


@router.get("/catalog")
async def onboarding_catalog():
    return {"interests": INTERESTS, "activities": ACTIVITIES}


@router.get("/activities")
async def recommended_activities(
    interests: str = Query("", description="Comma-separated interest ids")
):
    """Activities split into recommended (matching an interest) and other."""
    selected = [i.strip() for i in interests.split(",") if i.strip()]
    return split_activities(selected)


@router.post("/transition", response_model=WizardTransitionResponse)
async def wizard_transition(request: WizardTransitionRequest):
    """
    Apply one wizard action.

    Actions not allowed from the posted step are rejected with 422. An
    interests submit with nothing selected returns the state unchanged
    (`changed` is false).
    """
    new_state, changed = OnboardingWorkflow.apply(
        request.state, request.action, item_id=request.item_id, selection=request.selection
    )

    split = None
    if new_state.step == WizardStep.ACTIVITIES:
        split = split_activities(new_state.interests)

    return WizardTransitionResponse(state=new_state, changed=changed, split=split)


@router.post("/complete")
async def complete_onboarding(
    state: WizardState,
    identity: Optional[UserIdentity] = Depends(get_current_identity),
):
    """
    Finish the wizard. Selections are saved for signed-in callers and
    discarded otherwise.
    """
    if identity is None:
        on_complete = discard_selections
    else:
        on_complete = get_preferences_service().completion_hook(identity)

    saved = OnboardingWorkflow.finish(state, on_complete)
    return {
        "success": True,
        "saved": saved is not None,
        "interests": state.interests,
        "activities": state.activities,
    }
