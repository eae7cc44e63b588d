"""File names for exported documents.

The naming template may contain these tags:

    [suggested-filename]  file name reported by the site script, without .pdf
    [description]         document description
    [date]                issue date, formatted with the date format setting
    [account-name]        account display name ([website-name] is an alias)

Date formats use date-fns style tokens (yyyy, yy, MM, M, dd, d); anything
else in the pattern is copied literally.
"""

import re
from datetime import date

_DATE_TOKENS = re.compile(r"yyyy|yy|MM|M|dd|d")
# Characters that cannot appear in a file name on any supported platform.
_UNSAFE = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def _render_token(token: str, day: date) -> str:
    if token == "yyyy":
        return f"{day.year:04d}"
    if token == "yy":
        return f"{day.year % 100:02d}"
    if token == "MM":
        return f"{day.month:02d}"
    if token == "M":
        return str(day.month)
    if token == "dd":
        return f"{day.day:02d}"
    return str(day.day)


def format_date(day: date, pattern: str) -> str:
    """Format ``day`` with a date-fns style pattern.

    >>> format_date(date(2024, 3, 5), "d-M-yyyy")
    '5-3-2024'
    """
    return _DATE_TOKENS.sub(lambda m: _render_token(m.group(0), day), pattern)


def strip_pdf_suffix(file_name: str) -> str:
    return file_name[:-4] if file_name.lower().endswith(".pdf") else file_name


def with_pdf_suffix(file_name: str) -> str:
    return file_name if file_name.lower().endswith(".pdf") else f"{file_name}.pdf"


def render_file_name(
    template: str,
    *,
    suggested: str,
    description: str = "",
    issued_on: date | None = None,
    account_name: str = "",
    date_format: str = "d-M-yyyy",
) -> str:
    """Fill in the naming template and append ``.pdf``.

    Path separators and other characters that are invalid in file names
    are replaced by ``-``. An empty result falls back to the suggested name.
    """
    rendered = (
        template.replace("[suggested-filename]", strip_pdf_suffix(suggested))
        .replace("[description]", description)
        .replace("[date]", format_date(issued_on, date_format) if issued_on else "")
        .replace("[account-name]", account_name)
        .replace("[website-name]", account_name)
    )
    rendered = _UNSAFE.sub("-", rendered).strip()
    if not rendered:
        rendered = _UNSAFE.sub("-", strip_pdf_suffix(suggested)).strip() or "document"
    return with_pdf_suffix(rendered)


def mail_attachment_name(account_name: str, file_name: str) -> str:
    """Attachment file name: ``"<account> - <file>.pdf"``."""
    return with_pdf_suffix(f"{account_name} - {file_name}")
