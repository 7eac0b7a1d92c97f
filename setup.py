"""Setup configuration for SSB-Manager."""

import os
import sys

from setuptools import find_packages, setup

# Get version from package
here = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, os.path.join(here, "ssbmanager"))
try:
    from ssbmanager import __author__, __version__
except ImportError:
    __version__ = "0.1.0"
    __author__ = "SSB-Manager Team"

# Get the long description from the README file
with open(os.path.join(here, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="ssb-manager",
    version=__version__,
    description="Scheduled MySQL and home directory backups with disk-space aware retention",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author=__author__,
    keywords="backup mysql rsync cron retention cli",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"ssbmanager": ["templates/*.j2"]},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "click>=8.0.0",
        "pyyaml>=6.0",
        "jinja2>=3.0.0",
        "jsonschema>=4.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.12.0",
            "mypy>=0.991",
        ],
    },
    entry_points={
        "console_scripts": [
            "ssb-manager=ssbmanager.cli:cli",
        ],
    },
)
