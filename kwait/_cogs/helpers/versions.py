"""
Detecting the package's own version.

The codebase does not contain the version directly: releases depend
on the git tags (via ``setuptools_scm``), not on in-code version bumps.

The version is determined only once at startup when the code is loaded.
"""
import importlib.metadata
from typing import Optional

version: Optional[str] = None

try:
    name, *_ = __name__.split('.')  # usually "kwait", unless renamed/forked.
    version = importlib.metadata.version(name)
except importlib.metadata.PackageNotFoundError:
    pass  # running from a source tree without installation.
