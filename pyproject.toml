[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ferrules"
version = "5.5.1"
description = "Run, verify and track progress through small Rust exercises from the command line"
requires-python = ">=3.11"
dependencies = [
    "watchdog",
]
keywords = ["rust", "exercises", "learning", "education", "rust-analyzer", "clippy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education :: Computer Aided Instruction (CAI)",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ferrules = "ferrules.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ferrules"]

[tool.pytest.ini_options]
addopts = "-ra"
