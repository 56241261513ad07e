import re
from datetime import datetime


def latin1(text: str) -> str:
    """Encode to latin-1, replacing unsupported chars; fpdf core fonts are latin-1 only."""
    return text.encode("latin-1", errors="replace").decode("latin-1")


def truncate(text: str | None, limit: int) -> str:
    text = text or ""
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)] + "..."


def wrap_text(text: str | None, width: int) -> list[str]:
    """Greedy word wrap by character count. Blank lines in the input are kept."""
    lines: list[str] = []
    for paragraph in (text or "").splitlines():
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        line = ""
        for word in words:
            while len(word) > width:
                if line:
                    lines.append(line)
                    line = ""
                lines.append(word[:width])
                word = word[width:]
            candidate = f"{line} {word}" if line else word
            if len(candidate) > width:
                lines.append(line)
                line = word
            else:
                line = candidate
        if line:
            lines.append(line)
    # Trailing blank lines would only push the cursor down
    while lines and not lines[-1]:
        lines.pop()
    return lines


def strip_number_prefix(number: str | None, prefix: str | None) -> str:
    """``INV-2024-0042`` with prefix ``INV`` displays as ``2024-0042``."""
    number = number or ""
    if prefix and number.upper().startswith(prefix.upper()):
        stripped = number[len(prefix):].lstrip("-_ #")
        if stripped:
            return stripped
    return number


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        pass
    # Date-only or space separated timestamps from older rows
    m = re.match(r"^(\d{4}-\d{2}-\d{2})", raw)
    if m:
        return datetime.strptime(m.group(1), "%Y-%m-%d")
    return None


def format_date(value: str | None) -> str:
    dt = parse_timestamp(value)
    if dt is None:
        return "N/A"
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


def format_datetime(value: str | None) -> str:
    dt = parse_timestamp(value)
    if dt is None:
        return "N/A"
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}, {dt.strftime('%I:%M %p')}"


def join_nonempty(parts, sep: str = ", ") -> str:
    return sep.join(p for p in parts if p)
