"""npm registry client: keyword search and package metadata."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from constants import Constants, ExitCodes
from common.errors import die
from common.http_client import safe_get
from common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url

from ..base import PkgInfo, format_author

logger = logging.getLogger(__name__)

HEADERS = {"Accept": "application/json"}


def _json_or_die(res, what: str) -> Any:
    try:
        return json.loads(res.text)
    except json.JSONDecodeError as e:
        die("npm response for %s: %s", what, e, code=ExitCodes.CONNECTION_ERROR)


def search(queries: List[str], url: str = None) -> List[PkgInfo]:
    """Search the npm registry; query terms are joined with spaces.

    Args:
        queries: Search terms.
        url: Registry base URL. Defaults to Constants.REGISTRY_URL_NPM.
    """
    base = url or Constants.REGISTRY_URL_NPM
    text = " ".join(queries)
    fullurl = base + "-/v1/search"
    with Timer() as timer:
        res = safe_get(
            fullurl, context="npm", headers=HEADERS,
            params={"text": text, "size": Constants.NPM_SEARCH_SIZE},
        )
    if res.status_code != 200:
        die("npm search failed, status code: %s", res.status_code,
            code=ExitCodes.CONNECTION_ERROR)
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response ok",
            extra=extra_context(
                event="http_response", outcome="success", status_code=res.status_code,
                duration_ms=timer.duration_ms(), target=safe_url(fullurl),
                package_manager="npm",
            ),
        )

    body = _json_or_die(res, "search")
    results = []
    for obj in body.get("objects", []) if isinstance(body, dict) else []:
        pkg = obj.get("package") or {}
        links = pkg.get("links") or {}
        results.append(PkgInfo(
            name=pkg.get("name") or "",
            description=pkg.get("description") or "",
            version=pkg.get("version") or "",
            homepage_url=links.get("homepage") or "",
            source_code_url=links.get("repository") or "",
            bug_tracker_url=links.get("bugs") or "",
        ))
    return results


def _person(value: Any) -> str:
    if isinstance(value, dict):
        return format_author(value.get("name") or "", value.get("email") or "")
    if isinstance(value, str):
        return value
    return ""


def _repo_url(value: Any) -> str:
    if isinstance(value, dict):
        value = value.get("url") or ""
    if not isinstance(value, str):
        return ""
    if value.startswith("git+"):
        value = value[len("git+"):]
    if value.endswith(".git"):
        value = value[: -len(".git")]
    return value


def parse_packument(doc: Dict[str, Any]) -> Optional[PkgInfo]:
    """Build a PkgInfo from a registry package document (its latest version)."""
    if not doc.get("name"):
        return None
    latest = (doc.get("dist-tags") or {}).get("latest") or ""
    manifest = (doc.get("versions") or {}).get(latest) or {}

    bugs = manifest.get("bugs", doc.get("bugs"))
    if isinstance(bugs, dict):
        bugs = bugs.get("url")
    license_ = manifest.get("license", doc.get("license"))
    if isinstance(license_, dict):
        license_ = license_.get("type")

    return PkgInfo(
        name=doc["name"],
        description=manifest.get("description") or doc.get("description") or "",
        version=latest,
        homepage_url=manifest.get("homepage") or doc.get("homepage") or "",
        source_code_url=_repo_url(manifest.get("repository", doc.get("repository"))),
        bug_tracker_url=bugs if isinstance(bugs, str) else "",
        author=_person(manifest.get("author", doc.get("author"))),
        license=license_ if isinstance(license_, str) else "",
        dependencies=sorted((manifest.get("dependencies") or {}).keys()),
    )


def info(name: str, url: str = None) -> Optional[PkgInfo]:
    """Fetch metadata for one package; None on 404."""
    base = url or Constants.REGISTRY_URL_NPM
    # Scoped names keep their leading '@' but need the slash escaped.
    fullurl = base + quote(name, safe="@")
    res = safe_get(fullurl, context="npm", headers=HEADERS)
    if res.status_code == 404:
        logger.debug("npm package not found: %s", name)
        return None
    if res.status_code != 200:
        die("npm connection error, status code: %s", res.status_code,
            code=ExitCodes.CONNECTION_ERROR)
    doc = _json_or_die(res, name)
    if not isinstance(doc, dict):
        die("npm response for %s: expected an object", name, code=ExitCodes.CONNECTION_ERROR)
    return parse_packument(doc)
