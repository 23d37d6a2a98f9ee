"""Azure DevOps Advanced Security branch report."""

__version__ = "0.1.0"
