"""PyPI metadata queries.

Queries run through small embedded Python scripts that talk to PyPI's XML-RPC
endpoint and print a single JSON document on stdout. The scripts are an
opaque payload; this module only builds their command line and parses what
they print.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from constants import Constants
from common.errors import die
from common.process import get_cmd_output

from ..base import PkgInfo, format_author

logger = logging.getLogger(__name__)

PYTHON_SEARCH_CODE = """
import json
import sys
import xmlrpc.client

query = sys.argv[1]
pypi = xmlrpc.client.ServerProxy(sys.argv[2])
results = pypi.search({"name": query})
json.dump(results, sys.stdout, indent=2)
print()
"""

PYTHON_INFO_CODE = """
import json
import sys
import xmlrpc.client

package = sys.argv[1]
pypi = xmlrpc.client.ServerProxy(sys.argv[2])
releases = pypi.package_releases(package)
if not releases:
    print("{}")
    sys.exit(0)
release, = releases
info = pypi.release_data(package, release)
json.dump(info, sys.stdout, indent=2)
print()
"""

# Label substrings, checked in order, for classifying project URLs.
URL_CATEGORIES = (
    ("doc", "documentation_url"),
    ("code", "source_code_url"),
    ("track", "bug_tracker_url"),
)

_REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9]([A-Za-z0-9._-]*[A-Za-z0-9])?)")


def _decode(output: str) -> Any:
    try:
        return json.loads(output)
    except json.JSONDecodeError as e:
        die("PyPI response: %s", e)


def _run_script(code: str, arg: str) -> str:
    return get_cmd_output([
        Constants.PYTHON_EXECUTABLE, "-c", code, arg, Constants.REGISTRY_URL_PYPI_XMLRPC,
    ])


def search(queries: List[str]) -> List[PkgInfo]:
    """Search PyPI by name; the query terms are joined with spaces."""
    query = " ".join(queries)
    entries = _decode(_run_script(PYTHON_SEARCH_CODE, query))
    if not isinstance(entries, list):
        die("PyPI response: expected a list, got %s", type(entries).__name__)
    results = []
    for entry in entries:
        if not isinstance(entry, dict):
            die("PyPI response: unexpected search entry %r", entry)
        results.append(PkgInfo(
            name=entry.get("name") or "",
            description=entry.get("summary") or "",
            version=entry.get("version") or "",
        ))
    logger.debug("PyPI search %r returned %d result(s)", query, len(results))
    return results


def info(name: str) -> Optional[PkgInfo]:
    """Fetch release metadata for ``name``; None if PyPI has no such package."""
    data = _decode(_run_script(PYTHON_INFO_CODE, name))
    if not isinstance(data, dict):
        die("PyPI response: expected an object, got %s", type(data).__name__)
    return parse_release_data(data)


def parse_release_data(data: Dict[str, Any]) -> Optional[PkgInfo]:
    """Convert an XML-RPC ``release_data`` document into a PkgInfo."""
    if not data.get("name"):
        return None

    pkg = PkgInfo(
        name=data["name"],
        description=data.get("summary") or "",
        version=data.get("version") or "",
        homepage_url=data.get("home_page") or "",
        license=data.get("license") or "",
        author=format_author(data.get("author") or "", data.get("author_email") or ""),
    )
    _classify_project_urls(pkg, data.get("project_url") or [])
    pkg.dependencies = unconditional_dependencies(data.get("requires_dist") or [])
    return pkg


def _classify_project_urls(pkg: PkgInfo, project_urls: List[str]) -> None:
    for line in project_urls:
        fields = line.split(", ", 1)
        if len(fields) != 2:
            continue
        label, url = fields
        label = label.lower()
        for needle, attr in URL_CATEGORIES:
            if needle in label:
                if not getattr(pkg, attr):
                    setattr(pkg, attr, url)
                break


def unconditional_dependencies(requires_dist: List[str]) -> List[str]:
    """Names of requirements that do not depend on an extra being requested."""
    deps = []
    for line in requires_dist:
        if "extra ==" in line:
            continue
        m = _REQUIREMENT_NAME_RE.match(line)
        if not m:
            logger.debug("Skipping unparseable requirement %r", line)
            continue
        deps.append(m.group(1))
    return deps
