[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bard"
version = "0.1.0"
description = "Send typed lines over a small TCP chunk protocol, list recently changed files, and find round dots in images."
requires-python = ">=3.10"
keywords = ["tcp", "chat", "chunked protocol", "hough transform", "dot detection", "recent files"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bard-aether = "bard.aether:main"
bard-typed-voice = "bard.typed_voice:main"
bard-file = "bard.file_bard:main"
bard-hough = "bard.hough:main"

[tool.hatch.build.targets.wheel]
packages = ["bard"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
