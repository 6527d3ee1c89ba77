import pydantic
from pydantic_core import PydanticSerializationError

from exc import DecodeError, EncodeError
from models import AdmissionResponse, AdmissionReview


def decode_review(data: bytes | str) -> AdmissionReview:
    """Parse an AdmissionReview envelope carrying a request, a response, or both."""
    try:
        return AdmissionReview.model_validate_json(data)
    except pydantic.ValidationError as err:
        raise DecodeError(f"invalid AdmissionReview: {err}")


def decode(data: bytes | str) -> AdmissionReview:
    """Parse the envelope the API server sends to a webhook.

    Raises DecodeError if the body is not JSON, does not match the
    AdmissionReview schema, or has no request to review.
    """

    review = decode_review(data)
    if review.request is None:
        raise DecodeError("AdmissionReview does not contain a request")

    return review


def encode(review: AdmissionReview, response: AdmissionResponse) -> bytes:
    """Serialize the reply to review.

    The reply always carries the uid of the reviewed request and the
    apiVersion the API server used, whatever uid the response was built with.
    """

    try:
        reply = AdmissionReview(
            apiVersion=review.apiVersion,
            response=response.model_copy(update={"uid": review.request.uid}),
        )
        return reply.model_dump_json(exclude_none=True).encode()
    except (pydantic.ValidationError, PydanticSerializationError) as err:
        raise EncodeError(f"failed to encode AdmissionReview: {err}")
