"""Core LLM plumbing for the Business Roadmap Generator.

This package contains the provider layer and local preference storage.
It has ZERO dependency on any UI framework.
"""

__version__ = "0.3.0"
