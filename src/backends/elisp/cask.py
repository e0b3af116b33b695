"""Cask file editing and the elisp payloads evaluated through ``cask eval``."""
from __future__ import annotations

import re
from typing import Dict, Iterable, List

# Prints one name=version line per package directory on the load path.
ELISP_INSTALL_CODE = r"""
(dolist (dir load-path)
  (when (string-match "elpa/\\(.+\\)-\\([^-]+\\)" dir)
    (princ (format "%s=%s\n"
                   (match-string 1 dir)
                   (match-string 2 dir)))))
"""

# Prints one name=spec line per runtime and development dependency.
ELISP_LIST_SPECFILE_CODE = r"""
(let* ((bundle (cask-cli--bundle))
       (deps (append (cask-runtime-dependencies bundle)
                     (cask-development-dependencies bundle))))
  (dolist (d deps)
    (let ((fetcher (cask-dependency-fetcher d))
          (url (cask-dependency-url d))
          (files (cask-dependency-files d))
          (ref (cask-dependency-ref d))
          (branch (cask-dependency-branch d)))
      (princ (format "%S=%s%s%s%s\n"
                     (cask-dependency-name d)
                     (if fetcher (format "%S %S" fetcher url) "")
                     (if files (format ":files %S" files) "")
                     (if ref (format ":ref %S" ref) "")
                     (if branch (format ":branch %S" branch) ""))))))
"""

_LOCK_LINE_RE = re.compile(r"^(.+)=(.+)$", re.MULTILINE)


def cask_template(sources: Iterable[str]) -> str:
    """A fresh Cask file declaring the given package archives."""
    return "".join(f"(source {s})\n" for s in sources)


def append_dependencies(contents: str, pkgs: Dict[str, str]) -> str:
    """Append one ``depends-on`` form per package to a Cask file's text."""
    if contents and not contents.endswith("\n"):
        contents += "\n"
    lines: List[str] = []
    for name, spec in pkgs.items():
        form = f'(depends-on "{name}"'
        if spec:
            form += f" {spec}"
        lines.append(form + ")\n")
    return contents + "".join(lines)


# Body of one form: plain characters, strings, and one level of nested lists
# such as ``:files ("*.el")``.
_FORM_BODY = r'(?:[^()"\n]|"[^"\n]*"|\((?:[^()"\n]|"[^"\n]*")*\))*'


def _depends_on_form(name: str) -> str:
    return r'\(depends-on +"' + re.escape(name) + '"' + _FORM_BODY + r'\)'


def remove_dependencies(contents: str, names: Iterable[str]) -> str:
    """Delete the ``depends-on`` forms for ``names``, leaving everything else.

    A form alone on its line takes the line with it. A form sharing its line
    with other text, such as the closing paren of ``(development ...)``, is
    cut out on its own so the enclosing form stays balanced.
    """
    for name in names:
        form = _depends_on_form(name)
        whole_line = re.compile(r'^[ \t]*' + form + r'[ \t]*(?:\n|$)', re.MULTILINE)
        contents = whole_line.sub("", contents)
        contents = re.sub(r'[ \t]*' + form, "", contents)
    return contents


def parse_spec_lines(output: str) -> List[List[str]]:
    """Split ``name=spec`` lines; lines without '=' come back as one element."""
    return [line.split("=", 1) for line in output.split("\n") if line]


def parse_packages_txt(contents: str) -> Dict[str, str]:
    return {m.group(1): m.group(2) for m in _LOCK_LINE_RE.finditer(contents)}
