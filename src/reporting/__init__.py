from .narrative import REPORTS, render_markdown, save_report

__all__ = ['REPORTS', 'render_markdown', 'save_report']
