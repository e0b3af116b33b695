"""upm - one package manager interface for every language."""
import json
import logging
import os
import sys

from constants import Constants, ExitCodes, OutputFormats, _load_yaml_config
from common.errors import BackendNotImplemented, die
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from backends import Lockable, PkgName, PkgSpec, default_registry

logger = logging.getLogger(__name__)

INFO_FIELDS = [
    ("Name", "name"),
    ("Description", "description"),
    ("Version", "version"),
    ("Homepage", "homepage_url"),
    ("Documentation", "documentation_url"),
    ("Source code", "source_code_url"),
    ("Bug tracker", "bug_tracker_url"),
    ("Author", "author"),
    ("License", "license"),
]


def parse_package_args(tokens):
    """Turn CLI package arguments into a name -> spec mapping.

    Each argument is either a bare name or "name spec", split on the first
    run of whitespace.
    """
    pkgs = {}
    for token in tokens:
        fields = token.strip().split(None, 1)
        if not fields:
            continue
        spec = fields[1].strip() if len(fields) > 1 else ""
        pkgs[PkgName(fields[0])] = PkgSpec(spec)
    return pkgs


def render_table(rows, headers):
    """Render rows as left-aligned columns."""
    if not rows:
        return ""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines = []
    for row in [headers, ["-" * w for w in widths]] + rows:
        lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
    return "\n".join(lines)


def render_info(info):
    lines = []
    for label, attr in INFO_FIELDS:
        value = getattr(info, attr)
        if value:
            lines.append(f"{label + ':':<15}{value}")
    if info.dependencies:
        lines.append(f"{'Dependencies:':<15}{', '.join(info.dependencies)}")
    return "\n".join(lines)


def _emit(text):
    if text:
        print(text)


def _json(obj):
    _emit(json.dumps(obj, indent=2, sort_keys=True))


def _wants_json(args):
    return getattr(args, "OUTPUT_FORMAT", None) == OutputFormats.JSON.value


def maybe_lock(backend, args):
    if getattr(args, "NO_LOCK", False):
        return
    if not isinstance(backend, Lockable):
        logger.debug("Skipping lock for %s: builds are not reproducible", backend.name)
        return
    backend.lock()


def maybe_install(backend, args):
    if getattr(args, "NO_INSTALL", False):
        return
    backend.install()


def cmd_which_language(args, registry):
    print(registry.get(args.LANGUAGE).name)


def cmd_list_languages(_args, registry):
    for name in registry.names():
        print(name)


def cmd_search(args, registry):
    results = registry.get(args.LANGUAGE).search(args.QUERIES)
    if _wants_json(args):
        _json([r.to_dict() for r in results])
        return
    if not results:
        logger.info("No results found.")
        return
    rows = [[r.name, r.version, r.description] for r in results]
    _emit(render_table(rows, ["Name", "Version", "Description"]))


def cmd_info(args, registry):
    info = registry.get(args.LANGUAGE).info(PkgName(args.PACKAGE))
    if info is None:
        die("no such package: %s", args.PACKAGE)
    if _wants_json(args):
        _json(info.to_dict())
    else:
        _emit(render_info(info))


def cmd_add(args, registry):
    backend = registry.get(args.LANGUAGE)
    backend.add(parse_package_args(args.PACKAGES))
    maybe_lock(backend, args)
    maybe_install(backend, args)


def cmd_remove(args, registry):
    backend = registry.get(args.LANGUAGE)
    backend.remove({PkgName(p) for p in args.PACKAGES})
    maybe_lock(backend, args)
    maybe_install(backend, args)


def cmd_lock(args, registry):
    backend = registry.get(args.LANGUAGE)
    if not isinstance(backend, Lockable):
        raise backend.not_implemented("lock")
    backend.lock()
    maybe_install(backend, args)


def cmd_install(args, registry):
    registry.get(args.LANGUAGE).install()


def cmd_list(args, registry):
    backend = registry.get(args.LANGUAGE)
    if args.ALL:
        pkgs = backend.list_lockfile()
        headers = ["Name", "Version"]
    else:
        pkgs = backend.list_specfile()
        headers = ["Name", "Spec"]
    if _wants_json(args):
        _json(dict(pkgs))
        return
    if not pkgs:
        logger.info("No packages found in %s.", backend.lockfile if args.ALL else backend.specfile)
        return
    _emit(render_table([[n, v] for n, v in sorted(pkgs.items())], headers))


def cmd_guess(args, registry):
    for name in sorted(registry.get(args.LANGUAGE).guess()):
        print(name)


COMMANDS = {
    "which-language": cmd_which_language,
    "list-languages": cmd_list_languages,
    "search": cmd_search,
    "info": cmd_info,
    "add": cmd_add,
    "remove": cmd_remove,
    "lock": cmd_lock,
    "install": cmd_install,
    "list": cmd_list,
    "guess": cmd_guess,
}


def run(args, registry):
    """Dispatch one parsed command against ``registry``.

    Returns:
        int: Exit code
    """
    if is_debug_enabled(logger):
        logger.debug(
            "Dispatching command",
            extra=extra_context(event="function_entry", component="cli", action=args.action),
        )
    try:
        COMMANDS[args.action](args, registry)
    except BackendNotImplemented as e:
        logger.error("%s: not supported for %s", e.operation, e.backend)
        return ExitCodes.NOT_IMPLEMENTED.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging(log_file=args.LOG_FILE, quiet=args.QUIET)

    _load_yaml_config(args.CONFIG)

    registry = default_registry()
    registry.check()

    sys.exit(run(args, registry))


if __name__ == "__main__":
    main()
