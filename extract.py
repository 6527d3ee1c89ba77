import pydantic

from models import AdmissionRequest, PartialObject


def identity(req: AdmissionRequest) -> str:
    """Return the name of the object under review.

    Prefer the name on the request itself. On creates that use generateName
    the request name is empty, so fall back to metadata.name of the embedded
    object. An object we cannot read yields an empty name.
    """

    if req.name:
        return req.name

    if req.object is None:
        return ""

    try:
        obj = PartialObject.model_validate(req.object)
    except pydantic.ValidationError:
        return ""

    return obj.metadata.name or ""
