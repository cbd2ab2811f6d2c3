[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "segmentlink"
version = "0.1.0"
description = "Two small UDP protocols: sequenced data segments with ACK/REJECT replies, and subscriber access permission checks"
requires-python = ">=3.10"
dependencies = []
keywords = ["udp", "protocol", "acknowledgement", "retransmission", "networking", "subscriber"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
segmentlink-server = "segmentlink.server:main"
segmentlink-client = "segmentlink.client:main"
segmentlink-access-server = "segmentlink.access_server:main"
segmentlink-access-client = "segmentlink.access_client:main"

[tool.hatch.build.targets.wheel]
packages = ["segmentlink"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
