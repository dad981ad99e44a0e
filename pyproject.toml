[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "srtkit"
version = "0.1.0"
description = "Merge, shift and resynchronise SubRip (.srt) subtitle files"
requires-python = ">=3.10"
dependencies = []
keywords = ["srt", "subtitles", "subrip", "merge", "sync", "offset"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video",
    "Topic :: Text Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
srt = "srtkit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["srtkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
