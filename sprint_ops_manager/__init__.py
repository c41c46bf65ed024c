"""Sprint Ops Manager: weekly sprint automation for Jira Software boards."""

__version__ = "0.1.0"
