"""GenStudio adapter-boundary package.

Architectural role:
- Defines the developer CLI entrypoint.
- Converts local files into request attachments.

Scope:
- No direct model invocation logic is implemented in this package root.
"""
