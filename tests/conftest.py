"""Shared fixtures for the preop-risk test suite."""

import copy
import logging

import pytest

from preop_risk.domain.patient_record import REFERENCE_PATIENT_DATA


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler changes made by ``setup_logging`` during a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def reference_data():
    """The intake form defaults in wire format (a fresh, mutable copy)."""
    return copy.deepcopy(REFERENCE_PATIENT_DATA)


@pytest.fixture
def all_rules_data(reference_data):
    """A record that triggers every risk rule (BMI kept below 35)."""
    data = copy.deepcopy(reference_data)
    data["demographics"]["age"] = 72
    data["demographics"]["bodyMassIndex"] = 32
    data["labs"]["hemoglobin"] = 9.5
    data["comorbidities"] = ["Diabetes", "Hypertension"]
    data["surgeryComplexity"] = "High"
    return data


@pytest.fixture
def low_risk_data(reference_data):
    """A record that triggers no risk rule."""
    data = copy.deepcopy(reference_data)
    data["comorbidities"] = []
    data["surgeryComplexity"] = "Low"
    return data
