"""Per-operation schema synthesis.

Turns an operation's heterogeneous parameter declarations into the
:class:`~specclient.models.SchemaSet` consumed by both live invokers and the
exporter, so the two can never disagree about what a valid call looks like.
"""

from specclient.schema.synthesizer import synthesize_schemas

__all__ = ["synthesize_schemas"]
