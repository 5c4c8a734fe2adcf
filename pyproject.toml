[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "metablog"
version = "0.1.0"
description = "Building blocks for rendering LaTeX articles to HTML: document nodes, numbering, citations, code highlighting and LaTeXML conversion"
requires-python = ">=3.10"
keywords = ["latex", "html", "latexml", "katex", "citations", "syntax-highlighting"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Markup :: LaTeX",
    "Topic :: Text Processing :: Markup :: HTML",
]
dependencies = [
    "pygments",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["metablog"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
