[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mariadb-wire"
version = "0.1.0"
description = "Building blocks for the MariaDB/MySQL client/server wire protocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["mariadb", "mysql", "protocol", "wire", "database", "packets"]
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
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mariadb_wire"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
