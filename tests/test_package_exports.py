"""Tests for the public names re-exported by each subpackage."""

import importlib

import pytest


@pytest.mark.parametrize(
    "package",
    [
        "src.pathtracer.core",
        "src.pathtracer.geometry",
        "src.pathtracer.materials",
        "src.pathtracer.scene",
        "src.pathtracer.camera",
        "src.pathtracer.preview",
    ],
)
def test_all_names_resolve(package):
    module = importlib.import_module(package)

    missing = [name for name in module.__all__ if not hasattr(module, name)]
    assert missing == []


@pytest.mark.parametrize(
    "package, name",
    [
        ("src.pathtracer.materials", "MetalMaterial"),
        ("src.pathtracer.materials", "DielectricMaterial"),
        ("src.pathtracer.materials", "LambertianMaterial"),
        ("src.pathtracer.materials", "LightMaterial"),
        ("src.pathtracer.camera", "get_camera_origin"),
        ("src.pathtracer.camera", "get_camera_basis"),
    ],
)
def test_unused_helpers_are_not_exported(package, name):
    module = importlib.import_module(package)

    assert name not in module.__all__
    assert not hasattr(module, name)


def test_scene_manager_has_no_capacity_getters():
    from src.pathtracer.scene.manager import SceneManager

    for name in ("get_max_spheres", "get_max_planes", "get_max_materials"):
        assert not hasattr(SceneManager, name)
