import os

from setuptools import find_namespace_packages

ROOT = os.path.join(os.path.dirname(__file__), os.pardir)


def test_app_subpackages_are_installed():
    packages = find_namespace_packages(where=ROOT, include=["app*"])
    for name in ("app", "app.core", "app.routers", "app.services", "app.stores", "app.client"):
        assert name in packages
