"""Shareable URL and markdown link helpers."""


def generate_url(drawing_id: str, host: str, port: int | str) -> str:
    """Build the browser URL for a drawing."""
    return f"http://{host}:{port}/drawing/{drawing_id}"


def generate_markdown_link(title: str, drawing_id: str, host: str, port: int | str) -> str:
    """Build a markdown link suitable for pasting into notes."""
    return f"[{title}]({generate_url(drawing_id, host, port)})"
