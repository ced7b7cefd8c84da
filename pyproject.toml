[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyredis"
version = "0.1.0"
description = "A small in-memory key-value server speaking the Redis serialization protocol (RESP)"
requires-python = ">=3.10"
keywords = ["redis", "resp", "key-value", "server", "database"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tinyredis = "tinyredis.main:main"

[tool.hatch.build.targets.wheel]
packages = ["tinyredis"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
