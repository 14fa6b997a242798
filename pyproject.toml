[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "prostgen"
version = "0.11.8"
description = "Generate prost-style Rust source code from Protocol Buffers file descriptors"
requires-python = ">=3.10"
dependencies = [
    "protobuf",
]
keywords = ["protobuf", "protocol-buffers", "code-generation", "rust", "protoc"]
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
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["prostgen"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
