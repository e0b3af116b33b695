"""Tests for argument parsing, command dispatch and output rendering."""

import json

import pytest

import upm
from args import parse_args
from backends import BackendRegistry, LanguageBackend, PkgInfo, Quirks
from constants import Constants, ExitCodes


class RecordingBackend(LanguageBackend):
    """Backend that records operations instead of running tools."""

    name = "rec"
    specfile = "rec.spec"
    lockfile = "rec.lock"
    quirks = Quirks.NONE

    def __init__(self):
        self.ops = []
        self.spec = {"zeta": "^1", "alpha": ""}
        self.locked = {"alpha": "1.0.0"}

    def detect(self):
        return True

    def search(self, queries):
        self.ops.append(("search", list(queries)))
        return [PkgInfo(name="left-pad", description="pads", version="1.3.0")]

    def info(self, name):
        if name == "missing":
            return None
        return PkgInfo(name=name, version="2.0.0", license="MIT", dependencies=["a", "b"])

    def add(self, pkgs):
        self.ops.append(("add", dict(pkgs)))

    def remove(self, pkgs):
        self.ops.append(("remove", sorted(pkgs)))

    def lock(self):
        self.ops.append(("lock",))

    def install(self):
        self.ops.append(("install",))

    def list_specfile(self):
        return dict(self.spec)

    def list_lockfile(self):
        return dict(self.locked)

    def guess(self):
        return {"requests", "flask"}


class UnreproducibleBackend(RecordingBackend):
    name = "unrep"
    quirks = Quirks.NOT_REPRODUCIBLE
    lock = None

    def guess(self):
        raise self.not_implemented("guess")


@pytest.fixture
def rec():
    return RecordingBackend()


@pytest.fixture
def unrep():
    return UnreproducibleBackend()


@pytest.fixture
def registry(rec, unrep):
    return BackendRegistry([rec, unrep])


def run(argv, registry):
    return upm.run(parse_args(argv), registry)


class TestParseArgs:
    def test_defaults(self):
        """Test default values of the global and list options."""
        args = parse_args(["list"])
        assert args.action == "list"
        assert args.LANGUAGE == ""
        assert args.ALL is False
        assert args.OUTPUT_FORMAT == "table"

    def test_global_options(self):
        """Test --lang, --loglevel and --quiet are parsed."""
        args = parse_args(["--lang", "nodejs-yarn", "--loglevel", "debug", "-q", "install"])
        assert args.LANGUAGE == "nodejs-yarn"
        assert args.LOG_LEVEL == "DEBUG"
        assert args.QUIET is True

    def test_followup_flags(self):
        """Test add accepts --no-lock and --no-install."""
        args = parse_args(["add", "--no-lock", "--no-install", "requests ^2.28"])
        assert args.PACKAGES == ["requests ^2.28"]
        assert args.NO_LOCK and args.NO_INSTALL

    def test_lock_has_no_no_lock_flag(self):
        """Test the lock verb rejects --no-lock."""
        with pytest.raises(SystemExit):
            parse_args(["lock", "--no-lock"])

    def test_command_required(self):
        """Test a verb is required."""
        with pytest.raises(SystemExit):
            parse_args([])

    def test_format_is_case_insensitive(self):
        """Test the output format is normalized to lower case."""
        assert parse_args(["search", "-f", "JSON", "x"]).OUTPUT_FORMAT == "json"


class TestRendering:
    def test_parse_package_args(self):
        """Test package arguments split into name and spec on the first whitespace."""
        assert upm.parse_package_args(["requests ^2.28", "flask", "  attrs   >=23 ,<24 "]) == {
            "requests": "^2.28",
            "flask": "",
            "attrs": ">=23 ,<24",
        }

    def test_parse_package_args_skips_blank(self):
        """Test blank package arguments are ignored."""
        assert upm.parse_package_args(["", "  "]) == {}

    def test_render_table(self):
        """Test table rendering pads columns to the widest cell."""
        out = upm.render_table([["a", "1.0"], ["longer", "2"]], ["Name", "Version"])
        assert out.splitlines() == [
            "Name    Version",
            "------  -------",
            "a       1.0",
            "longer  2",
        ]

    def test_render_table_empty(self):
        """Test an empty table renders as nothing."""
        assert upm.render_table([], ["Name"]) == ""

    def test_render_info_skips_empty_fields(self):
        """Test info rendering omits empty fields and lists dependencies last."""
        out = upm.render_info(PkgInfo(name="x", version="1", dependencies=["y"]))
        assert "Name:" in out
        assert "Homepage" not in out
        assert out.splitlines()[-1].endswith("y")


class TestRun:
    def test_add_locks_and_installs(self, registry, rec):
        """Test add is followed by lock and install."""
        assert run(["-l", "rec", "add", "requests ^2.28"], registry) == 0
        assert rec.ops == [("add", {"requests": "^2.28"}), ("lock",), ("install",)]

    def test_add_followups_can_be_skipped(self, registry, rec):
        """Test --no-lock and --no-install suppress the follow-ups."""
        run(["-l", "rec", "add", "--no-lock", "--no-install", "x"], registry)
        assert rec.ops == [("add", {"x": ""})]

    def test_add_without_lock_support_skips_lock(self, registry, unrep):
        """Test add skips lock for a backend without lock support."""
        assert run(["-l", "unrep", "add", "dash"], registry) == 0
        assert unrep.ops == [("add", {"dash": ""}), ("install",)]

    def test_remove(self, registry, rec):
        """Test remove passes sorted names and runs the follow-ups."""
        run(["-l", "rec", "remove", "b", "a"], registry)
        assert rec.ops == [("remove", ["a", "b"]), ("lock",), ("install",)]

    def test_lock_unsupported(self, registry, unrep, caplog):
        """Test lock on a backend without lock support reports it and exits 4."""
        assert run(["-l", "unrep", "lock"], registry) == ExitCodes.NOT_IMPLEMENTED.value
        assert "lock: not supported for unrep" in caplog.text
        assert unrep.ops == []

    def test_lock_then_install(self, registry, rec):
        """Test the lock verb installs afterwards."""
        run(["-l", "rec", "lock"], registry)
        assert rec.ops == [("lock",), ("install",)]

    def test_guess_unsupported(self, registry):
        """Test an unsupported guess exits with NOT_IMPLEMENTED."""
        assert run(["-l", "unrep", "guess"], registry) == ExitCodes.NOT_IMPLEMENTED.value

    def test_guess_sorted(self, registry, capsys):
        """Test guessed packages are printed sorted."""
        run(["-l", "rec", "guess"], registry)
        assert capsys.readouterr().out == "flask\nrequests\n"

    def test_list_table_sorted(self, registry, capsys):
        """Test list prints the specfile as a sorted table."""
        run(["-l", "rec", "list"], registry)
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["Name", "Spec"]
        assert lines[2].startswith("alpha")
        assert lines[3].startswith("zeta")

    def test_list_all_json(self, registry, capsys):
        """Test list --all --format json prints the lockfile mapping."""
        run(["-l", "rec", "list", "--all", "--format", "json"], registry)
        assert json.loads(capsys.readouterr().out) == {"alpha": "1.0.0"}

    def test_search_json(self, registry, capsys):
        """Test search results can be printed as JSON."""
        run(["-l", "rec", "search", "-f", "json", "left", "pad"], registry)
        data = json.loads(capsys.readouterr().out)
        assert data[0]["name"] == "left-pad"

    def test_info_table(self, registry, capsys):
        """Test info prints package fields."""
        run(["-l", "rec", "info", "flask"], registry)
        out = capsys.readouterr().out
        assert "flask" in out
        assert "MIT" in out

    def test_info_missing_package(self, registry, caplog):
        """Test info on an unknown package is fatal."""
        with pytest.raises(SystemExit):
            run(["-l", "rec", "info", "missing"], registry)
        assert "no such package: missing" in caplog.text

    def test_which_language_autodetects(self, registry, capsys):
        """Test which-language prints the detected backend."""
        run(["which-language"], registry)
        assert capsys.readouterr().out == "rec\n"

    def test_list_languages(self, registry, capsys):
        """Test list-languages prints every backend in order."""
        run(["list-languages"], registry)
        assert capsys.readouterr().out == "rec\nunrep\n"

    def test_unknown_language(self, registry):
        """Test an unknown --lang is fatal."""
        with pytest.raises(SystemExit):
            run(["-l", "fortran", "install"], registry)


class TestMain:
    def test_main_dispatches(self, in_tmp, monkeypatch, rec, capsys):
        """Test main exports the log level and exits with the command status."""
        monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "INFO")
        monkeypatch.delenv(Constants.ENV_CONFIG, raising=False)
        monkeypatch.setattr(upm, "configure_logging", lambda **kw: None)
        monkeypatch.setattr(upm, "default_registry", lambda: BackendRegistry([rec]))
        with pytest.raises(SystemExit) as exc:
            upm.main(["--loglevel", "warning", "which-language"])
        assert exc.value.code == 0
        assert capsys.readouterr().out == "rec\n"
        assert upm.os.environ[Constants.ENV_LOG_LEVEL] == "WARNING"

    def test_main_reads_config(self, in_tmp, monkeypatch, rec):
        """Test main applies the --config file before dispatching."""
        monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "INFO")
        monkeypatch.setattr(Constants, "CASK_DEFAULT_SOURCES", list(Constants.CASK_DEFAULT_SOURCES))
        monkeypatch.setattr(upm, "configure_logging", lambda **kw: None)
        monkeypatch.setattr(upm, "default_registry", lambda: BackendRegistry([rec]))
        (in_tmp / "cfg.yml").write_text("cask:\n  sources: [melpa]\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            upm.main(["--config", "cfg.yml", "install"])
        assert Constants.CASK_DEFAULT_SOURCES == ["melpa"]
        assert rec.ops == [("install",)]
