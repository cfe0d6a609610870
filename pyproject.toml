[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "opemstore"
version = "0.1.0"
description = "MongoDB models, query filters and update-document builders for domains, files, user cards, user roles and key/value packages."
requires-python = ">=3.10"
keywords = ["mongodb", "pymongo", "query-builder", "update-document", "store"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
]
dependencies = [
    "pymongo",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["opemstore"]

[tool.pytest.ini_options]
addopts = "-ra"
