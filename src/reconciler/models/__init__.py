from .contracts import (
    Contact,
    ContactSummary,
    IdentifyRequest,
    IdentifyResponse,
    LinkPrecedence,
)

__all__ = [
    "Contact",
    "ContactSummary",
    "IdentifyRequest",
    "IdentifyResponse",
    "LinkPrecedence",
]
