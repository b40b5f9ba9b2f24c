[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "exifwrap"
version = "0.1.0"
description = "Read and write file metadata through a long-running exiftool process"
requires-python = ">=3.10"
dependencies = []
keywords = ["exiftool", "exif", "metadata", "xmp", "iptc", "images"]
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
    "Topic :: Multimedia :: Graphics",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["exifwrap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
