"""A setuptools setup module for proto_to_mjs"""

# Standard
import os

# Third Party
from setuptools import setup

# Read the README to provide the long description
python_base = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(python_base, "README.md"), "r") as handle:
    long_description = handle.read()

# Read version from the env
version = os.environ.get("RELEASE_VERSION", "0.0.0.dev0")

# Read in the requirements
with open(os.path.join(python_base, "requirements.txt"), "r") as handle:
    requirements = handle.read()

setup(
    name="proto-to-mjs",
    version=version,
    description="A protoc plugin that generates ES module javascript classes from Protobuf schemas",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords=["protobuf", "proto", "protoc", "plugin", "javascript", "mjs"],
    packages=["proto_to_mjs"],
    install_requires=requirements,
    extras_require={"test": ["pytest>=7"]},
    entry_points={
        "console_scripts": ["protoc-gen-mjs=proto_to_mjs.plugin:main"],
    },
)
