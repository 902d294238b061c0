# tests/integration/test_applicant_workflow.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Hiring pipeline where every state is configured by its own handler class and
the single PROCEED event is routed by guards over the applicant's scores.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List

import pytest

from flowstate import MachineBuilder, when
from flowstate.plugins import StateHandlerRegistry
from flowstate.testing import Scenario

pytestmark = pytest.mark.integration


class ApplicationState(Enum):
    SUBMITTED = auto()
    INITIAL_SCREENING = auto()
    TECHNICAL_REVIEW = auto()
    HR_INTERVIEW = auto()
    TECHNICAL_INTERVIEW = auto()
    FINAL_REVIEW = auto()
    BACKGROUND_CHECK = auto()
    OFFER_EXTENDED = auto()
    ON_HOLD = auto()
    HIRED = auto()
    REJECTED = auto()
    WITHDRAWN = auto()


class ApplicationEvent(Enum):
    PROCEED = auto()
    REJECT = auto()
    WITHDRAW = auto()


@dataclass
class Applicant:
    name: str
    experience_years: int = 0
    screening_score: float = 0.0
    technical_score: float = 0.0
    has_red_flags: bool = False
    visited: List[ApplicationState] = field(default_factory=list)

    @property
    def is_exceptional(self) -> bool:
        return self.screening_score >= 9.0 and self.technical_score >= 8.5 and self.experience_years >= 8


S = ApplicationState
E = ApplicationEvent

red_flags = when(lambda a: a.has_red_flags)


def _visit(transition, applicant):
    applicant.visited.append(transition.to_state)


class SubmittedHandler:
    state = S.SUBMITTED

    def configure(self, configuration):
        return (
            configuration.permit(E.PROCEED, S.INITIAL_SCREENING)
            .permit(E.REJECT, S.REJECTED)
            .permit(E.WITHDRAW, S.WITHDRAWN)
        )


class InitialScreeningHandler:
    state = S.INITIAL_SCREENING

    def configure(self, configuration):
        return (
            configuration.permit_if(E.PROCEED, S.REJECTED, red_flags | when(lambda a: a.screening_score < 4.0))
            .permit_if(E.PROCEED, S.FINAL_REVIEW, when(lambda a: a.is_exceptional))
            .permit_if(E.PROCEED, S.TECHNICAL_REVIEW, when(lambda a: a.screening_score >= 7.5))
            .permit_if(E.PROCEED, S.HR_INTERVIEW, when(lambda a: a.screening_score >= 6.0))
            .permit(E.PROCEED, S.ON_HOLD)
            .permit(E.REJECT, S.REJECTED)
            .permit(E.WITHDRAW, S.WITHDRAWN)
        )


class TechnicalReviewHandler:
    state = S.TECHNICAL_REVIEW

    def configure(self, configuration):
        return (
            configuration.permit_if(E.PROCEED, S.REJECTED, when(lambda a: a.technical_score < 5.0))
            .permit_if(E.PROCEED, S.HR_INTERVIEW, when(lambda a: a.technical_score >= 7.0))
            .permit(E.PROCEED, S.TECHNICAL_INTERVIEW)
            .permit(E.WITHDRAW, S.WITHDRAWN)
        )


class HrInterviewHandler:
    state = S.HR_INTERVIEW

    def configure(self, configuration):
        return (
            configuration.permit_if(E.PROCEED, S.REJECTED, red_flags)
            .permit_if(
                E.PROCEED,
                S.FINAL_REVIEW,
                when(lambda a: a.technical_score >= 8.0) & when(lambda a: a.screening_score >= 8.0),
            )
            .permit(E.PROCEED, S.TECHNICAL_INTERVIEW)
            .permit(E.WITHDRAW, S.WITHDRAWN)
        )


class TechnicalInterviewHandler:
    state = S.TECHNICAL_INTERVIEW

    def configure(self, configuration):
        return (
            configuration.permit_if(E.PROCEED, S.REJECTED, when(lambda a: a.technical_score < 6.0))
            .permit(E.PROCEED, S.FINAL_REVIEW)
            .permit(E.WITHDRAW, S.WITHDRAWN)
        )


class FinalReviewHandler:
    state = S.FINAL_REVIEW

    def configure(self, configuration):
        ready = ~red_flags & when(lambda a: a.technical_score >= 7.0 and a.screening_score >= 7.0)
        return (
            configuration.permit_if(E.PROCEED, S.REJECTED, red_flags)
            .permit_if(E.PROCEED, S.BACKGROUND_CHECK, ready)
            .permit(E.PROCEED, S.ON_HOLD)
            .permit(E.REJECT, S.REJECTED)
        )


class BackgroundCheckHandler:
    state = S.BACKGROUND_CHECK

    def configure(self, configuration):
        return configuration.permit_if(E.PROCEED, S.REJECTED, red_flags).permit(E.PROCEED, S.OFFER_EXTENDED)


class OfferExtendedHandler:
    state = S.OFFER_EXTENDED

    def configure(self, configuration):
        return configuration.permit(E.PROCEED, S.HIRED).permit(E.REJECT, S.REJECTED)


class OnHoldHandler:
    state = S.ON_HOLD

    def configure(self, configuration):
        return configuration.permit(E.PROCEED, S.INITIAL_SCREENING).permit(E.WITHDRAW, S.WITHDRAWN)


class TerminalHandler:
    def __init__(self, state):
        self.state = state

    def configure(self, configuration):
        return configuration.as_final()


@pytest.fixture(scope="module")
def machine():
    registry = StateHandlerRegistry()
    for handler in (
        SubmittedHandler(),
        InitialScreeningHandler(),
        TechnicalReviewHandler(),
        HrInterviewHandler(),
        TechnicalInterviewHandler(),
        FinalReviewHandler(),
        BackgroundCheckHandler(),
        OfferExtendedHandler(),
        OnHoldHandler(),
        TerminalHandler(S.HIRED),
        TerminalHandler(S.REJECTED),
        TerminalHandler(S.WITHDRAWN),
    ):
        registry.register(handler)
    builder = registry.apply_to(MachineBuilder(), S.SUBMITTED)
    return builder.on_any_entry(_visit).build()


def exceptional_candidate():
    return Applicant("Ada", experience_years=10, screening_score=9.5, technical_score=9.0)


def standard_candidate():
    return Applicant("Sam", experience_years=5, screening_score=7.0, technical_score=7.0)


def test_pipeline_is_valid(machine):
    result = machine.validate()
    assert result.is_valid, result.errors
    assert result.warnings == ()
    assert len(machine.get_info().states) == len(ApplicationState)


def test_exceptional_candidate_is_fast_tracked(machine):
    applicant = exceptional_candidate()

    state = machine.fire(S.SUBMITTED, E.PROCEED, applicant)
    state = machine.fire(state, E.PROCEED, applicant)

    assert state is S.FINAL_REVIEW
    assert applicant.visited == [S.INITIAL_SCREENING, S.FINAL_REVIEW]


def test_exceptional_candidate_is_hired(machine):
    report = Scenario(machine, S.SUBMITTED, exceptional_candidate()).fire(*[E.PROCEED] * 5).run()

    report.expect_state(S.HIRED).expect_trace(
        S.INITIAL_SCREENING, S.FINAL_REVIEW, S.BACKGROUND_CHECK, S.OFFER_EXTENDED, S.HIRED
    )
    assert machine.is_final_state(report.final_state)


def test_standard_candidate_takes_long_route(machine):
    report = Scenario(machine, S.SUBMITTED, standard_candidate()).fire(*[E.PROCEED] * 7).run()

    report.expect_trace(
        S.INITIAL_SCREENING,
        S.HR_INTERVIEW,
        S.TECHNICAL_INTERVIEW,
        S.FINAL_REVIEW,
        S.BACKGROUND_CHECK,
        S.OFFER_EXTENDED,
        S.HIRED,
    )


def test_strong_screening_goes_to_technical_review(machine):
    applicant = Applicant("Lin", experience_years=3, screening_score=8.0, technical_score=6.0)
    report = Scenario(machine, S.SUBMITTED, applicant).fire(E.PROCEED, E.PROCEED, E.PROCEED).run()

    report.expect_trace(S.INITIAL_SCREENING, S.TECHNICAL_REVIEW, S.TECHNICAL_INTERVIEW)


def test_red_flags_reject_at_screening(machine):
    applicant = Applicant("Max", experience_years=10, screening_score=9.5, technical_score=9.0, has_red_flags=True)
    report = Scenario(machine, S.SUBMITTED, applicant).fire(E.PROCEED, E.PROCEED, E.PROCEED).run()

    report.expect_state(S.REJECTED).expect_trace(S.INITIAL_SCREENING, S.REJECTED, S.REJECTED)
    assert report.trace[-1][1].succeeded is False


def test_weak_candidate_goes_on_hold_and_can_return(machine):
    applicant = Applicant("Kim", experience_years=1, screening_score=5.0, technical_score=5.0)
    report = (
        Scenario(machine, S.SUBMITTED, applicant)
        .fire(E.PROCEED, E.PROCEED)
        .mutate(lambda a: setattr(a, "screening_score", 6.5))
        .fire(E.PROCEED, E.PROCEED)
        .run()
    )
    report.expect_trace(S.INITIAL_SCREENING, S.ON_HOLD, S.INITIAL_SCREENING, S.HR_INTERVIEW)


def test_withdrawal(machine):
    applicant = standard_candidate()
    state = machine.fire(S.SUBMITTED, E.PROCEED, applicant)
    assert machine.can_fire(state, E.WITHDRAW, applicant)
    assert machine.fire(state, E.WITHDRAW, applicant) is S.WITHDRAWN
    assert not machine.can_fire(S.WITHDRAWN, E.PROCEED, applicant)
