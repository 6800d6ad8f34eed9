import re

# "Bug: 123", "bug #123", "BUG 123" or "[123]"
_ISSUE_REF_RE = re.compile(r"bug:?\s*#?(\d+)|\[(\d+)\]", re.IGNORECASE)


def find_issue_reference(title: str) -> str | None:
    """Return the first issue number referenced in a pull request title, or None."""
    match = _ISSUE_REF_RE.search(title or "")
    if match is None:
        return None
    return match.group(1) or match.group(2)


def issue_link(url_template: str, organization: str, issue_id: str) -> str:
    return url_template.format(org=organization, id=issue_id)
