[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kawstratum"
version = "0.1.0"
description = "Stratum mining helpers: hex, base32 and base64 codecs, strict number parsing, 256-bit integers with compact targets, and ProgPoW kernel source generation"
requires-python = ">=3.10"
dependencies = []
keywords = ["stratum", "progpow", "kawpow", "uint256", "compact-target", "base32", "base64", "hex"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["kawstratum"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
