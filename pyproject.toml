[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cloudconnector"
version = "0.1.0"
description = "Building blocks for a cloud connector service: MQTT topics and message handlers, WSGI authentication middleware, inventory recording and connection-count reporting."
requires-python = ">=3.10"
keywords = [
    "mqtt",
    "wsgi",
    "middleware",
    "authentication",
    "inventory",
    "kafka",
    "jwt",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "pyjwt>=2.4",
    "cryptography>=38",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
]

[tool.hatch.build.targets.wheel]
packages = ["cloudconnector"]

[tool.hatch.build.targets.sdist]
include = ["cloudconnector", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
