"""AWS Audit - read-only resource audit and count digest CLI tool."""

__version__ = "0.1.0"
