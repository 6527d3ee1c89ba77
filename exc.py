class ApplicationError(Exception):
    pass


class DecodeError(ApplicationError):
    """The request body is not a usable AdmissionReview."""


class EncodeError(ApplicationError):
    """The response envelope could not be serialized."""


class PatchError(ApplicationError):
    pass
