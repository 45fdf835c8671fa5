"""Error taxonomy of the slip ingestion core.

An unreadable amount is not an error: it is the ``NONE`` extraction result.
"""


class SlipError(Exception):
    """Base class for ingestion errors."""


class MalformedImage(SlipError):
    """The upload is not a decodable, non-empty image. The caller must resubmit."""


class EngineInitializationFailure(SlipError):
    """The OCR engine could not be started; OCR stays unavailable for the process."""


class DuplicateReceipt(SlipError):
    """The same receipt was already ingested for this organization."""

    def __init__(self, kind, existing_receipt_id):
        self.kind = kind
        self.existing_receipt_id = existing_receipt_id
        super().__init__(f"{kind.value}: already recorded as receipt {existing_receipt_id}")
