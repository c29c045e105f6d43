#!/usr/bin/env python

from importlib.util import module_from_spec, spec_from_file_location

from setuptools import setup


NAME = "entity_choice"

PYTHON_VERSION = ">=3.9"

REQUIRES = [
    "pydantic>=2.0,<3",
    "click>=8.1",
    "SQLAlchemy>=2.0,<3",
    "WTForms>=3.1",
]

EXTRAS_REQUIRE = {
    "test": [
        "pytest",
    ],
}


_version_spec = spec_from_file_location(
    "__version__", f"{NAME}/__version__.py"
)
_version_module = module_from_spec(_version_spec)
_version_spec.loader.exec_module(_version_module)
VERSION = str(_version_module.__version__)


DESCRIPTION = (
    "Form field for selecting one or more SQLAlchemy entities from a list."
)

LONG_DESCRIPTION = open("README.md").read()


setup(
    name="entity-choice",
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",

    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Typing :: Typed",
    ],

    python_requires=PYTHON_VERSION,
    install_requires=REQUIRES,
    extras_require=EXTRAS_REQUIRE,

    packages=[NAME],
    include_package_data=True,
    # make package compatible with PEP 561:
    # https://mypy.readthedocs.io/en/latest/installed_packages.html#creating-pep-561-compatible-packages
    package_data={NAME: ["py.typed"]},
    zip_safe=False,
)
