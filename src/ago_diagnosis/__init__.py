"""AGO diagnosis: rubric-driven AI-readiness checks for a single web page."""

__version__ = "0.1.0"
