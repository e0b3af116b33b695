"""Tests for the nodejs-yarn backend, its yarn.lock parser and npm client."""

import json
from unittest.mock import MagicMock

import pytest

from backends.nodejs import backend as yarn_mod
from backends.nodejs import npm_client
from backends.nodejs.backend import NodejsYarnBackend
from backends.nodejs.lockfile_parser import parse_yarn_lock


YARN_LOCK = """# THIS IS AN AUTOGENERATED FILE. DO NOT EDIT THIS FILE DIRECTLY.
# yarn lockfile v1


"@babel/code-frame@^7.0.0", "@babel/code-frame@^7.22.13":
  version "7.22.13"
  resolved "https://registry.yarnpkg.com/@babel/code-frame/-/code-frame-7.22.13.tgz"
  dependencies:
    chalk "^2.4.2"

chalk@^2.4.2:
  version "2.4.2"
  resolved "https://registry.yarnpkg.com/chalk/-/chalk-2.4.2.tgz"

left-pad@1.3.0, left-pad@^1.3.0:
  version "1.3.0"
  resolved "https://registry.yarnpkg.com/left-pad/-/left-pad-1.3.0.tgz"
"""


@pytest.fixture
def yarn(monkeypatch, recorder):
    monkeypatch.setattr(yarn_mod, "run_cmd", recorder.run)
    return NodejsYarnBackend()


class TestYarnLockParser:
    """Line-oriented yarn.lock parsing."""

    def test_single_quoted_entry(self):
        """Test a single quoted yarn.lock entry."""
        assert parse_yarn_lock('"foo@^1.0.0":\n  version "1.2.3"\n') == {"foo": "1.2.3"}

    def test_full_lockfile(self):
        """Test a lockfile with scoped and multi-range entries."""
        assert parse_yarn_lock(YARN_LOCK) == {
            "@babel/code-frame": "7.22.13",
            "chalk": "2.4.2",
            "left-pad": "1.3.0",
        }

    def test_nested_dependency_lines_ignored(self):
        """Test nested dependency lines are not taken as entries."""
        assert "dependencies" not in parse_yarn_lock(YARN_LOCK)

    def test_empty(self):
        """Test an empty lockfile."""
        assert parse_yarn_lock("") == {}


class TestYarnBackend:
    """File parsing and subprocess invocations."""

    def test_list_lockfile(self, in_tmp, yarn):
        """Test listing yarn.lock."""
        (in_tmp / "yarn.lock").write_text(YARN_LOCK, encoding="utf-8")
        assert yarn.list_lockfile()["chalk"] == "2.4.2"

    def test_list_lockfile_missing_is_fatal(self, in_tmp, yarn):
        """Test listing a missing yarn.lock is fatal."""
        with pytest.raises(SystemExit):
            yarn.list_lockfile()

    def test_list_specfile_merges_dev_dependencies(self, in_tmp, yarn):
        """Test dependencies and devDependencies are merged."""
        (in_tmp / "package.json").write_text(json.dumps({
            "name": "demo",
            "dependencies": {"react": "^18.2.0"},
            "devDependencies": {"jest": "^29.0.0"},
        }), encoding="utf-8")
        assert yarn.list_specfile() == {"react": "^18.2.0", "jest": "^29.0.0"}

    def test_list_specfile_without_dependencies(self, in_tmp, yarn):
        """Test a package.json without dependencies lists nothing."""
        (in_tmp / "package.json").write_text('{"name": "demo"}', encoding="utf-8")
        assert yarn.list_specfile() == {}

    def test_list_specfile_malformed_is_fatal(self, in_tmp, yarn, caplog):
        """Test malformed package.json is fatal and named."""
        (in_tmp / "package.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(SystemExit):
            yarn.list_specfile()
        assert "package.json" in caplog.text

    def test_add(self, in_tmp, yarn, recorder):
        """Test add passes name@spec or bare names to yarn."""
        yarn.add({"react": "^18.2.0", "lodash": ""})
        assert recorder.calls == [["yarn", "add", "react@^18.2.0", "lodash"]]

    def test_remove_missing_specfile_is_fatal(self, in_tmp, yarn, recorder):
        """Test remove without package.json is fatal and runs nothing."""
        with pytest.raises(SystemExit):
            yarn.remove({"react"})
        assert recorder.calls == []

    def test_remove(self, in_tmp, yarn, recorder):
        """Test remove runs yarn remove."""
        (in_tmp / "package.json").write_text("{}", encoding="utf-8")
        yarn.remove({"react"})
        assert recorder.calls == [["yarn", "remove", "react"]]

    def test_lock_and_install(self, yarn, recorder):
        """Test lock runs yarn upgrade and install runs yarn install."""
        yarn.lock()
        yarn.install()
        assert recorder.calls == [["yarn", "upgrade"], ["yarn", "install"]]

    def test_guess_not_implemented(self, yarn):
        """Test nodejs-yarn guess is not supported."""
        with pytest.raises(NotImplementedError):
            yarn.guess()


PACKUMENT = {
    "name": "left-pad",
    "description": "String left pad",
    "dist-tags": {"latest": "1.3.0"},
    "versions": {
        "1.3.0": {
            "name": "left-pad",
            "description": "String left pad",
            "homepage": "https://github.com/stevemao/left-pad#readme",
            "repository": {"type": "git", "url": "git+https://github.com/stevemao/left-pad.git"},
            "bugs": {"url": "https://github.com/stevemao/left-pad/issues"},
            "author": {"name": "azer", "email": "azer@kodfabrik.com"},
            "license": "WTFPL",
            "dependencies": {"b": "^1.0.0", "a": "^2.0.0"},
        },
    },
}


def _response(status, body):
    res = MagicMock()
    res.status_code = status
    res.text = json.dumps(body)
    return res


class TestNpmClient:
    """npm registry metadata."""

    def test_parse_packument(self):
        """Test the latest manifest is mapped onto PkgInfo."""
        info = npm_client.parse_packument(PACKUMENT)
        assert info.name == "left-pad"
        assert info.version == "1.3.0"
        assert info.source_code_url == "https://github.com/stevemao/left-pad"
        assert info.bug_tracker_url == "https://github.com/stevemao/left-pad/issues"
        assert info.author == "azer <azer@kodfabrik.com>"
        assert info.license == "WTFPL"
        assert info.dependencies == ["a", "b"]

    def test_info_not_found(self, monkeypatch):
        """Test a 404 yields no package."""
        monkeypatch.setattr(npm_client, "safe_get", lambda url, **kw: _response(404, {}))
        assert npm_client.info("no-such-package") is None

    def test_info_scoped_name_url(self, monkeypatch):
        """Test scoped names keep '@' and escape the slash."""
        seen = []

        def fake_get(url, **kwargs):
            seen.append(url)
            return _response(200, dict(PACKUMENT, name="@scope/pkg"))

        monkeypatch.setattr(npm_client, "safe_get", fake_get)
        info = npm_client.info("@scope/pkg", url="https://registry.example/")
        assert seen == ["https://registry.example/@scope%2Fpkg"]
        assert info.name == "@scope/pkg"

    def test_search(self, monkeypatch):
        """Test search joins terms into the text parameter."""
        body = {"objects": [{"package": {
            "name": "left-pad", "version": "1.3.0", "description": "String left pad",
            "links": {"npm": "https://www.npmjs.com/package/left-pad"},
        }}]}
        captured = {}

        def fake_get(url, **kwargs):
            captured.update(kwargs)
            return _response(200, body)

        monkeypatch.setattr(npm_client, "safe_get", fake_get)
        results = npm_client.search(["left", "pad"])
        assert captured["params"]["text"] == "left pad"
        assert [r.name for r in results] == ["left-pad"]

    def test_search_no_matches(self, monkeypatch):
        """Test an empty search result."""
        monkeypatch.setattr(npm_client, "safe_get", lambda url, **kw: _response(200, {"objects": []}))
        assert npm_client.search(["zzzz"]) == []

    def test_server_error_is_fatal(self, monkeypatch):
        """Test a server error is fatal."""
        monkeypatch.setattr(npm_client, "safe_get", lambda url, **kw: _response(500, {}))
        with pytest.raises(SystemExit):
            npm_client.info("left-pad")
