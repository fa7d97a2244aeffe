"""Static exporter -- render a standalone client module.

See :func:`~specclient.exporter.generator.export_client`.
"""

from specclient.exporter.generator import export_client, python_identifier

__all__ = ["export_client", "python_identifier"]
