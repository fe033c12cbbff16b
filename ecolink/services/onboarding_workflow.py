"""
Onboarding Wizard - strict linear state machine.

DESIGN PRINCIPLES:
- Steps are traversed in order: WELCOME → INTERESTS → ACTIVITIES → COMPLETE
- Leaving INTERESTS requires at least one interest; ACTIVITIES may be skipped
- Going back never clears selections already made
- Transitions are pure: they take a WizardState and return a new one
- Persisting the final selections is the completion callback's job
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ecolink.core.errors import ValidationError, WizardTransitionError
from ecolink.models.onboarding import (
    OnboardingSelections,
    WizardAction,
    WizardState,
    WizardStep,
)
from ecolink.services.onboarding_catalog import ACTIVITY_IDS, INTEREST_IDS

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[OnboardingSelections], object]


def _dedupe(ids: Iterable[str]) -> List[str]:
    seen = []
    for item in ids:
        if item not in seen:
            seen.append(item)
    return seen


def _toggle(selection: List[str], item_id: str) -> List[str]:
    if item_id in selection:
        return [s for s in selection if s != item_id]
    return selection + [item_id]


class OnboardingWorkflow:
    """
    Transition table and pure transition functions for the wizard.

    Rules:
    - Forward moves one step at a time
    - Back moves one step at a time, never below WELCOME
    - COMPLETE has no forward transition; finish() runs the callback
    """

    FORWARD: Dict[WizardStep, Optional[WizardStep]] = {
        WizardStep.WELCOME: WizardStep.INTERESTS,
        WizardStep.INTERESTS: WizardStep.ACTIVITIES,
        WizardStep.ACTIVITIES: WizardStep.COMPLETE,
        WizardStep.COMPLETE: None,
    }

    BACKWARD: Dict[WizardStep, Optional[WizardStep]] = {
        WizardStep.WELCOME: None,
        WizardStep.INTERESTS: WizardStep.WELCOME,
        WizardStep.ACTIVITIES: WizardStep.INTERESTS,
        WizardStep.COMPLETE: WizardStep.ACTIVITIES,
    }

    @classmethod
    def start(cls) -> WizardState:
        return WizardState()

    @classmethod
    def is_valid_transition(cls, from_step: str, to_step: str) -> bool:
        """
        Check if moving between two steps is allowed.

        Args:
            from_step: Current step
            to_step: Desired step

        Returns:
            True for the adjacent forward or backward step, False otherwise
        """
        try:
            from_enum = WizardStep(from_step)
            to_enum = WizardStep(to_step)
        except ValueError:
            return False
        return to_enum in (cls.FORWARD[from_enum], cls.BACKWARD[from_enum])

    @classmethod
    def get_allowed_transitions(cls, current_step: str) -> List[str]:
        try:
            current = WizardStep(current_step)
        except ValueError:
            return []
        return [s.value for s in (cls.FORWARD[current], cls.BACKWARD[current]) if s is not None]

    @classmethod
    def _require_step(cls, state: WizardState, expected: WizardStep, action: str) -> None:
        if state.step != expected:
            raise WizardTransitionError(
                f"Cannot {action} from step '{state.step.value}'. "
                f"Allowed transitions from {state.step.value}: {cls.get_allowed_transitions(state.step.value)}",
                fields=["step"],
            )

    @staticmethod
    def _check_ids(ids: Iterable[str], known: frozenset, kind: str) -> None:
        unknown = [i for i in ids if i not in known]
        if unknown:
            raise ValidationError(f"Unknown {kind}: {', '.join(unknown)}", fields=[kind])

    # Forward / backward moves

    @classmethod
    def confirm_welcome(cls, state: WizardState) -> WizardState:
        cls._require_step(state, WizardStep.WELCOME, "confirm welcome")
        return state.model_copy(update={"step": WizardStep.INTERESTS})

    @classmethod
    def toggle_interest(cls, state: WizardState, interest_id: str) -> WizardState:
        cls._require_step(state, WizardStep.INTERESTS, "select interests")
        cls._check_ids([interest_id], INTEREST_IDS, "interests")
        return state.model_copy(update={"interests": _toggle(list(state.interests), interest_id)})

    @classmethod
    def submit_interests(cls, state: WizardState, interests: Optional[Iterable[str]] = None) -> WizardState:
        """
        Leave INTERESTS for ACTIVITIES.

        An empty selection is not an error: the state is returned unchanged
        and the wizard stays on INTERESTS.
        """
        cls._require_step(state, WizardStep.INTERESTS, "submit interests")
        selection = _dedupe(interests if interests is not None else state.interests)
        if not selection:
            logger.info("Onboarding: no interest selected, staying on interests step")
            return state
        cls._check_ids(selection, INTEREST_IDS, "interests")
        return state.model_copy(update={"step": WizardStep.ACTIVITIES, "interests": selection})

    @classmethod
    def toggle_activity(cls, state: WizardState, activity_id: str) -> WizardState:
        cls._require_step(state, WizardStep.ACTIVITIES, "select activities")
        cls._check_ids([activity_id], ACTIVITY_IDS, "activities")
        return state.model_copy(update={"activities": _toggle(list(state.activities), activity_id)})

    @classmethod
    def submit_activities(cls, state: WizardState, activities: Optional[Iterable[str]] = None) -> WizardState:
        """Leave ACTIVITIES for COMPLETE. Zero activities is the 'skip' path."""
        cls._require_step(state, WizardStep.ACTIVITIES, "submit activities")
        selection = _dedupe(activities if activities is not None else state.activities)
        cls._check_ids(selection, ACTIVITY_IDS, "activities")
        return state.model_copy(update={"step": WizardStep.COMPLETE, "activities": selection})

    @classmethod
    def go_back(cls, state: WizardState) -> WizardState:
        previous = cls.BACKWARD[state.step]
        if previous is None:
            return state
        return state.model_copy(update={"step": previous})

    @classmethod
    def finish(cls, state: WizardState, on_complete: CompletionCallback):
        """
        Terminal action: hand the accumulated selections to the callback.

        Returns whatever the callback returns.
        """
        cls._require_step(state, WizardStep.COMPLETE, "finish onboarding")
        selections = OnboardingSelections(interests=list(state.interests), activities=list(state.activities))
        logger.info(
            f"Onboarding complete: {len(selections.interests)} interest(s), "
            f"{len(selections.activities)} activity(ies)"
        )
        return on_complete(selections)

    @classmethod
    def apply(
        cls,
        state: WizardState,
        action: WizardAction,
        item_id: Optional[str] = None,
        selection: Optional[List[str]] = None,
    ) -> Tuple[WizardState, bool]:
        """
        Dispatch one wizard action.

        Returns:
            (new_state, changed)
        """
        action = WizardAction(action)
        if action in (WizardAction.TOGGLE_INTEREST, WizardAction.TOGGLE_ACTIVITY) and not item_id:
            raise ValidationError("item_id is required for toggle actions", fields=["item_id"])

        if action == WizardAction.CONFIRM_WELCOME:
            new_state = cls.confirm_welcome(state)
        elif action == WizardAction.TOGGLE_INTEREST:
            new_state = cls.toggle_interest(state, item_id)
        elif action == WizardAction.SUBMIT_INTERESTS:
            new_state = cls.submit_interests(state, selection)
        elif action == WizardAction.TOGGLE_ACTIVITY:
            new_state = cls.toggle_activity(state, item_id)
        elif action == WizardAction.SUBMIT_ACTIVITIES:
            new_state = cls.submit_activities(state, selection)
        else:
            new_state = cls.go_back(state)

        return new_state, new_state != state


def discard_selections(selections: OnboardingSelections) -> None:
    """Completion callback for anonymous callers: nothing is stored."""
    logger.info("Onboarding selections not persisted (anonymous caller)")
