[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flacscan"
version = "0.4.3"
description = "A pure Python reader for FLAC stream metadata and subframes"
requires-python = ">=3.10"
dependencies = []
keywords = ["flac", "lossless", "audio", "codec", "metadata", "vorbis-comment"]
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
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["flacscan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
