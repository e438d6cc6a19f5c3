"""Parsers for client output.

All functions are pure and permissive: missing or malformed fields produce
empty values or are skipped, never an exception. XML is parsed with lxml in
recovery mode so truncated output still yields whatever entries survived.
"""

import re
from datetime import datetime

import pendulum
from lxml import etree

from ._models import BlameEntry, InfoRecord, LogEntry, StatusCode, StatusEntry

# Column at which the path starts in plain status output.
STATUS_PATH_OFFSET = 8

_SUMMARY_PREFIXES = (
    "Summary of conflicts",
    "At revision",
    "Updated to revision",
    "---",
    "Status against revision",
    "Performing status on external",
)

_COMMITTED_RE = re.compile(r"Committed revision (\d+)\.")
_UPDATED_RE = re.compile(r"(?:Updated to|At) revision (\d+)\.")
_FIRST_INT_RE = re.compile(r"\d+")
_UPDATE_FLAG_CHARS = frozenset("ADUCGEB ")

_XML_PARSER = etree.XMLParser(
    recover=True, resolve_entities=False, no_network=True, huge_tree=True
)


def _parse_xml(xml: str) -> etree._Element | None:  # pyright: ignore[reportPrivateUsage]
    if not xml or not xml.strip():
        return None
    try:
        return etree.fromstring(xml.strip().encode("utf-8"), parser=_XML_PARSER)
    except etree.XMLSyntaxError:
        return None


def _text(element: etree._Element | None, path: str) -> str:  # pyright: ignore[reportPrivateUsage]
    if element is None:
        return ""
    found = element.find(path)
    if found is None or found.text is None:
        return ""
    return found.text


def _int_or_none(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp from client output.

    Returns:
        A timezone-aware datetime, or None if absent or unparseable.
    """
    if not value or not value.strip():
        return None
    try:
        parsed = pendulum.parse(value.strip())
    except ValueError:
        return None
    return parsed if isinstance(parsed, datetime) else None


def _is_summary_line(line: str) -> bool:
    if line.startswith(_SUMMARY_PREFIXES) or "conflicts:" in line:
        return True
    # Tree-conflict detail lines ("      >   local edit, ...").
    return line.lstrip().startswith(">")


def parse_status_lines(text: str) -> list[StatusEntry]:
    """Parse plain ``status`` output.

    Each line has the status character in the first column and the path
    starting at a fixed offset. Blank and summary lines are skipped.

    Example:
        >>> parse_status_lines("M       notes/foo.md")
        [StatusEntry(path='notes/foo.md', status_code=<StatusCode.MODIFIED: 'M'>)]
    """
    entries: list[StatusEntry] = []
    for line in text.splitlines():
        if not line.strip() or _is_summary_line(line):
            continue
        path = line[STATUS_PATH_OFFSET:].strip() if len(line) > STATUS_PATH_OFFSET else ""
        if not path:
            path = line[1:].strip()
        if not path:
            continue
        entries.append(StatusEntry(path=path, status_code=StatusCode.from_char(line[0])))
    return entries


def parse_verbose_status_lines(text: str) -> list[StatusEntry]:
    """Parse ``status --verbose`` output.

    Versioned lines carry working revision, last-changed revision and author
    columns before the path. Unversioned and ignored lines carry the path
    only.
    """
    entries: list[StatusEntry] = []
    for line in text.splitlines():
        if not line.strip() or _is_summary_line(line):
            continue
        code = StatusCode.from_char(line[0])
        rest = line[STATUS_PATH_OFFSET:] if len(line) > STATUS_PATH_OFFSET else line[1:]
        if code in (StatusCode.UNVERSIONED, StatusCode.IGNORED):
            path = rest.strip()
        else:
            fields = rest.split(None, 3)
            path = fields[3].strip() if len(fields) == 4 else rest.strip()
        if path:
            entries.append(StatusEntry(path=path, status_code=code))
    return entries


def parse_log_xml(xml: str) -> list[LogEntry]:
    """Parse ``log --xml`` output into entries in document order.

    Entries without a numeric revision attribute are skipped.
    """
    root = _parse_xml(xml)
    if root is None:
        return []

    entries: list[LogEntry] = []
    for element in root.iter("logentry"):
        revision = _int_or_none(element.get("revision"))
        if revision is None:
            continue
        entries.append(
            LogEntry(
                revision=revision,
                author=_text(element, "author"),
                timestamp=parse_timestamp(_text(element, "date")),
                message=_text(element, "msg").strip(),
            )
        )
    return entries


def parse_info_xml(xml: str) -> InfoRecord | None:
    """Parse ``info --xml`` output for the first entry.

    Returns:
        The record, or None when no ``<url>`` is present.
    """
    root = _parse_xml(xml)
    if root is None:
        return None

    entry = root if root.tag == "entry" else root.find(".//entry")
    if entry is None:
        return None

    url = _text(entry, "url").strip()
    if not url:
        return None

    commit = entry.find("commit")
    return InfoRecord(
        url=url,
        repository_root_url=_text(entry, "repository/root").strip(),
        repository_uuid=_text(entry, "repository/uuid").strip(),
        working_revision=_int_or_none(entry.get("revision")),
        last_changed_revision=_int_or_none(commit.get("revision")) if commit is not None else None,
        last_changed_author=_text(commit, "author"),
        last_changed_date=parse_timestamp(_text(commit, "date")),
    )


def parse_blame_xml(xml: str) -> list[BlameEntry]:
    """Parse ``blame --xml`` output.

    Lines never committed (no ``<commit>`` element) are skipped.
    """
    root = _parse_xml(xml)
    if root is None:
        return []

    entries: list[BlameEntry] = []
    for element in root.iter("entry"):
        line_number = _int_or_none(element.get("line-number"))
        commit = element.find("commit")
        if line_number is None or commit is None:
            continue
        revision = _int_or_none(commit.get("revision"))
        if revision is None:
            continue
        entries.append(
            BlameEntry(
                line_number=line_number,
                revision=revision,
                author=_text(commit, "author"),
                timestamp=parse_timestamp(_text(commit, "date")),
            )
        )
    return entries


def parse_properties_xml(xml: str) -> dict[str, str]:
    """Parse ``proplist --verbose --xml`` output into a name/value mapping."""
    root = _parse_xml(xml)
    if root is None:
        return {}

    properties: dict[str, str] = {}
    for element in root.iter("property"):
        name = element.get("name")
        if name:
            properties[name] = element.text or ""
    return properties


def parse_list_size_xml(xml: str) -> int | None:
    """Return the ``<size>`` of the first entry in ``list --xml`` output."""
    root = _parse_xml(xml)
    if root is None:
        return None
    size = root.find(".//entry/size")
    return _int_or_none(size.text) if size is not None else None


def parse_rev_size(text: str) -> int | None:
    """Parse the byte count printed by ``svnadmin rev-size -q``."""
    match = _FIRST_INT_RE.search(text)
    return int(match.group()) if match else None


def parse_update_conflicts(text: str) -> list[str]:
    """Return paths flagged conflicted in ``update`` output.

    Update lines carry four flag columns before the path; a ``C`` in any of
    them marks a text, property or tree conflict.
    """
    conflicts: list[str] = []
    for line in text.splitlines():
        if len(line) < 5 or _is_summary_line(line):
            continue
        flags, path = line[:4], line[4:].strip()
        if "C" in flags and path and set(flags) <= _UPDATE_FLAG_CHARS:
            conflicts.append(path)
    return conflicts


def has_conflict_markers(text: str) -> bool:
    """Whether update or checkout output reports any conflict."""
    return "Summary of conflicts" in text or bool(parse_update_conflicts(text))


def parse_committed_revision(text: str) -> int | None:
    """Parse the revision from "Committed revision N." output."""
    match = _COMMITTED_RE.search(text)
    return int(match.group(1)) if match else None


def parse_updated_revision(text: str) -> int | None:
    """Parse the revision from "Updated to revision N." or "At revision N." output."""
    match = _UPDATED_RE.search(text)
    return int(match.group(1)) if match else None
