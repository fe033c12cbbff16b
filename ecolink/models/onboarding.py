"""
Models for the onboarding wizard: step values, the wizard state value
object, and the static interest/activity catalog entries.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WizardStep(str, Enum):
    """
    Linear onboarding steps:
    WELCOME → INTERESTS → ACTIVITIES → COMPLETE
    """
    WELCOME = "welcome"
    INTERESTS = "interests"
    ACTIVITIES = "activities"
    COMPLETE = "complete"


class WizardAction(str, Enum):
    CONFIRM_WELCOME = "confirm_welcome"
    TOGGLE_INTEREST = "toggle_interest"
    SUBMIT_INTERESTS = "submit_interests"
    TOGGLE_ACTIVITY = "toggle_activity"
    SUBMIT_ACTIVITIES = "submit_activities"
    BACK = "back"


class WizardState(BaseModel):
    """
    Immutable wizard progress. Transition functions return a new instance;
    selections survive backward navigation.
    """
    model_config = ConfigDict(frozen=True)

    step: WizardStep = WizardStep.WELCOME
    interests: List[str] = Field(default_factory=list)
    activities: List[str] = Field(default_factory=list)


class Interest(BaseModel):
    id: str
    name: str


class Activity(BaseModel):
    id: str
    title: str
    description: str
    location: str
    date: str
    time: str
    participants: int
    max_participants: int
    difficulty: str
    category: str
    tags: List[str] = Field(default_factory=list)


class ActivitySplit(BaseModel):
    """Catalog partitioned by the user's interests, recommended first."""
    recommended: List[Activity] = Field(default_factory=list)
    other: List[Activity] = Field(default_factory=list)


class WizardTransitionRequest(BaseModel):
    state: WizardState = Field(default_factory=WizardState)
    action: WizardAction
    item_id: Optional[str] = Field(None, description="Interest/activity id for toggle actions")
    selection: Optional[List[str]] = Field(None, description="Explicit selection for submit actions")


class WizardTransitionResponse(BaseModel):
    state: WizardState
    changed: bool
    split: Optional[ActivitySplit] = None


class OnboardingSelections(BaseModel):
    """Payload handed to the completion callback."""
    interests: List[str] = Field(default_factory=list)
    activities: List[str] = Field(default_factory=list)
