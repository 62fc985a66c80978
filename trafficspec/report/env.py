from pathlib import Path

from jinja2 import Environment, FileSystemLoader

# Output is Markdown/TypeScript source, never HTML
env = Environment(
    loader=FileSystemLoader(Path(__file__).parent / "templates"),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)
