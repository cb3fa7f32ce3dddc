"""Pytest configuration for ray caster tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture
def plain_material():
    """A white, fully local, non-reflective material."""
    from raycaster.materials.phong import MaterialParams

    return MaterialParams()


@pytest.fixture
def mirror_material():
    """A perfect mirror: no local colour, full reflectivity."""
    from raycaster.materials.phong import MaterialParams

    return MaterialParams(specular_exponent=50.0, k_local=0.0, k_reflectivity=1.0)
