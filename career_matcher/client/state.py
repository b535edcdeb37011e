"""Form state for the three-step upload → preview → pricing workflow.

The state is a single frozen dataclass; every transition is a pure function
returning a new value, so the store only ever swaps one reference.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from career_matcher.models import ServiceOption

FORM_STEP = 1
PREVIEW_STEP = 2
PRICING_STEP = 3

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"


@dataclass(frozen=True)
class CVFile:
    """An in-memory CV selected by the user."""

    name: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class FormState:
    cv_file: Optional[CVFile] = None
    role: str = ""
    job_description: str = ""
    selected_option: Optional[ServiceOption] = None
    terms_accepted: bool = False
    current_step: int = FORM_STEP
    is_loading: bool = False
    error: str = ""
    show_upsell: bool = False
    show_terms_modal: bool = False
    is_processing_payment: bool = False
    payment_session_id: Optional[str] = None
    payment_mode: str = "test"


# predicates


def is_form_valid(state: FormState) -> bool:
    return state.cv_file is not None and bool(state.role.strip())


def can_proceed_to_next_step(state: FormState) -> bool:
    if state.current_step == FORM_STEP:
        return is_form_valid(state)
    return state.current_step == PREVIEW_STEP


def can_submit(state: FormState) -> bool:
    return state.selected_option is not None and state.terms_accepted and not state.is_loading


# form fields


def set_cv_file(state: FormState, cv_file: Optional[CVFile]) -> FormState:
    return replace(state, cv_file=cv_file, error="")


def set_file_error(state: FormState, message: str) -> FormState:
    return replace(state, cv_file=None, error=message)


def set_role(state: FormState, role: str) -> FormState:
    return replace(state, role=role, error="")


def set_job_description(state: FormState, job_description: str) -> FormState:
    return replace(state, job_description=job_description)


def set_selected_option(state: FormState, option) -> FormState:
    """Accepts a ServiceOption, its string value, or None to clear the choice."""
    selected = None if option is None else ServiceOption.parse(option)
    if option is not None and selected is None:
        return replace(state, selected_option=None, error="Invalid service option")
    return replace(state, selected_option=selected, error="")


def set_terms_accepted(state: FormState, accepted: bool) -> FormState:
    return replace(state, terms_accepted=bool(accepted))


# steps


def go_to_next_step(state: FormState) -> FormState:
    if state.current_step == FORM_STEP:
        if is_form_valid(state):
            return replace(state, current_step=PREVIEW_STEP, error="")
        return replace(state, error=REQUIRED_FIELDS_MESSAGE)
    if state.current_step == PREVIEW_STEP:
        return replace(state, current_step=PRICING_STEP, error="")
    return state


def go_to_previous_step(state: FormState) -> FormState:
    if state.current_step == FORM_STEP:
        return state
    return replace(state, current_step=state.current_step - 1, error="", terms_accepted=False)


# errors and loading


def set_error(state: FormState, message: str) -> FormState:
    return replace(state, error=message)


def clear_error(state: FormState) -> FormState:
    return replace(state, error="")


def start_loading(state: FormState) -> FormState:
    return replace(state, is_loading=True, error="")


def stop_loading(state: FormState) -> FormState:
    return replace(state, is_loading=False)


# modals


def show_upsell_modal(state: FormState) -> FormState:
    return replace(state, show_upsell=True)


def hide_upsell_modal(state: FormState) -> FormState:
    return replace(state, show_upsell=False)


def open_terms_modal(state: FormState) -> FormState:
    return replace(state, show_terms_modal=True)


def hide_terms_modal(state: FormState) -> FormState:
    return replace(state, show_terms_modal=False)


# resets


def reset_form(state: FormState) -> FormState:
    return FormState(payment_mode=state.payment_mode)


def reset_after_success(state: FormState) -> FormState:
    """Keep the CV and role so another product can be bought, reset the rest."""
    return replace(
        state,
        selected_option=None,
        terms_accepted=False,
        current_step=FORM_STEP,
        error="",
    )


# payment


def start_payment(state: FormState) -> FormState:
    return replace(state, is_processing_payment=True, error="")


def stop_payment(state: FormState) -> FormState:
    return replace(state, is_processing_payment=False)


def set_payment_session(state: FormState, session_id: Optional[str], payment_mode: str = "test") -> FormState:
    return replace(state, payment_session_id=session_id, payment_mode=payment_mode or "test")


def restore_fields(
    state: FormState,
    cv_file: Optional[CVFile],
    role: str,
    job_description: str,
    selected_option: Optional[ServiceOption],
) -> FormState:
    return replace(
        state,
        cv_file=cv_file,
        role=role,
        job_description=job_description,
        selected_option=selected_option,
    )
