"""
HTML report generation for isp-pricing-verifier.

Key exports:
    - generate_report: Render the HTML report of a run directory
    - write_report: Generate and write report.html
"""

from .generator import generate_report, write_report

__all__ = ["generate_report", "write_report"]
