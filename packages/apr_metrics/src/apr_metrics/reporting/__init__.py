from .md import render_markdown_report

__all__ = ["render_markdown_report"]
