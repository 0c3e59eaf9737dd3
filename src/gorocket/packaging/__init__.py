"""
The `packaging` sub-package turns built binaries into release artifacts.

This includes:
- Packing each binary into a zip or tar.gz archive with a fixed layout.
- Orchestrating the build and release pipelines around the external tools.
"""
