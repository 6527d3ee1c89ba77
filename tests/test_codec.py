import base64
import json

import pytest

import codec
from exc import DecodeError
from models import AdmissionResponse, ApiVersion, Operation, PatchType
from patches import build_label_add, encode_patch


def test_decode(make_review):
    body = make_review(name="normal-pod", obj={"metadata": {"name": "normal-pod"}})
    res = codec.decode(json.dumps(body).encode())

    assert res.apiVersion == ApiVersion.V1
    assert res.request.uid == "1234"
    assert res.request.name == "normal-pod"
    assert res.request.kind.kind == "Pod"
    assert res.request.operation == Operation.CREATE
    assert res.request.object == {"metadata": {"name": "normal-pod"}}


def test_decode_ignores_unknown_fields(make_review):
    body = make_review()
    body["request"]["userInfo"] = {"username": "admin", "groups": ["system:masters"]}
    body["request"]["dryRun"] = False
    res = codec.decode(json.dumps(body))
    assert res.request.uid == "1234"


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"Ceci n'est pas JSON",
        b'{"request": {"uid": "1234"',
        b"{}",
        b"[]",
        b'{"request": {"name": "no-uid"}}',
        b'{"request": {"uid": ""}}',
        b'{"apiVersion": "admission.k8s.io/v2", "request": {"uid": "1234"}}',
        b'{"kind": "Pod", "request": {"uid": "1234"}}',
    ],
)
def test_decode_invalid(data):
    with pytest.raises(DecodeError):
        codec.decode(data)


def test_decode_requires_request():
    data = json.dumps({"response": {"uid": "1234", "allowed": True}})
    assert codec.decode_review(data).response.allowed
    with pytest.raises(DecodeError):
        codec.decode(data)


def test_encode_uses_request_uid(make_review):
    req = codec.decode(json.dumps(make_review(uid="the-request")))
    data = codec.encode(req, AdmissionResponse(uid="something-else", allowed=True))

    assert json.loads(data) == {
        "apiVersion": "admission.k8s.io/v1",
        "kind": "AdmissionReview",
        "response": {"uid": "the-request", "allowed": True},
    }


def test_encode_echoes_api_version(make_review):
    body = make_review()
    body["apiVersion"] = "admission.k8s.io/v1beta1"
    req = codec.decode(json.dumps(body))
    data = codec.encode(req, AdmissionResponse(uid="1234", allowed=True))
    assert json.loads(data)["apiVersion"] == "admission.k8s.io/v1beta1"


def test_round_trip_with_patch(make_review):
    req = codec.decode(json.dumps(make_review(uid="abcd")))
    patch = encode_patch(build_label_add(False, "create-by", "suyiiyii"))
    data = codec.encode(
        req,
        AdmissionResponse(
            uid="abcd", allowed=True, patchType=PatchType.JSONPatch, patch=patch
        ),
    )

    res = codec.decode_review(data).response
    assert res.uid == "abcd"
    assert res.allowed
    assert res.status is None
    assert base64.b64decode(res.patch) == base64.b64decode(patch)
    assert res.patchType == PatchType.JSONPatch


def test_round_trip_denied(make_review):
    req = codec.decode(json.dumps(make_review(uid="abcd")))
    data = codec.encode(
        req,
        AdmissionResponse(
            uid="abcd", allowed=False, status={"code": 403, "message": "no"}
        ),
    )

    res = codec.decode_review(data).response
    assert res.uid == "abcd"
    assert not res.allowed
    assert res.status.code == 403
    assert res.patch is None
