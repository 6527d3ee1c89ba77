from http import HTTPStatus
from typing import Any

import pydantic
from pydantic import BaseModel

from exc import PatchError
from models import (
    AdmissionResponse,
    GroupVersionKind,
    PatchType,
    Pod,
    Status,
)
from patches import build_label_add, encode_patch


class Decision(BaseModel):
    """The outcome of a policy for one request.

    Policies only compute decisions; logging them is up to the caller.
    """

    allowed: bool
    status: Status | None = None
    # base64 encoded JSON Patch, as carried by AdmissionResponse.patch
    patch: str | None = None

    def to_response(self, uid: str) -> AdmissionResponse:
        return AdmissionResponse(
            uid=uid,
            allowed=self.allowed,
            status=self.status,
            patchType=PatchType.JSONPatch if self.patch else None,
            patch=self.patch,
        )


def deny(code: HTTPStatus, message: str) -> Decision:
    return Decision(allowed=False, status=Status(code=code.value, message=message))


def summarize(err: pydantic.ValidationError) -> str:
    """Describe a validation error without echoing the submitted object."""
    problems = []
    for detail in err.errors(include_url=False, include_input=False):
        loc = ".".join(str(part) for part in detail["loc"]) or "object"
        problems.append(f"{loc}: {detail['msg']}")

    return "; ".join(problems)


class KeywordPolicy:
    """Deny objects whose name contains a keyword, ignoring case."""

    def __init__(self, keyword: str):
        if not keyword:
            raise ValueError("keyword must not be empty")

        self.keyword = keyword
        self._folded = keyword.casefold()

    def matches(self, identity: str) -> bool:
        return self._folded in identity.casefold()

    def validate(self, identity: str) -> Decision:
        if self.matches(identity):
            return deny(
                HTTPStatus.FORBIDDEN,
                f"resource name may not contain '{self.keyword}', "
                f"current name: {identity}",
            )

        return Decision(allowed=True)


class LabelPolicy:
    """Add a fixed label to every object of the given kinds."""

    def __init__(self, label_name: str, label_value: Any, kinds=("Pod",)):
        self.label_name = label_name
        self.label_value = label_value
        self.kinds = frozenset(kinds)

    def mutate(self, kind: GroupVersionKind | str | None, obj: Any) -> Decision:
        if isinstance(kind, GroupVersionKind):
            kind = kind.kind

        # We are called for kinds we do not care about; let them through.
        if kind not in self.kinds:
            return Decision(allowed=True)

        try:
            pod = Pod.model_validate(obj)
        except pydantic.ValidationError as err:
            return deny(
                HTTPStatus.BAD_REQUEST, f"failed to parse {kind}: {summarize(err)}"
            )

        try:
            patch = build_label_add(
                pod.metadata.labels is not None, self.label_name, self.label_value
            )
            encoded = encode_patch(patch)
        except PatchError as err:
            return deny(HTTPStatus.INTERNAL_SERVER_ERROR, str(err))

        return Decision(allowed=True, patch=encoded)
