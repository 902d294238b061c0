# flowstate/testing/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from .scenario import Scenario, ScenarioReport, ScenarioStep, check_all_events

__all__ = ["Scenario", "ScenarioReport", "ScenarioStep", "check_all_events"]
